"""Trade gate rules, their order, and the resulting decision text."""

from __future__ import annotations

import pytest

from signalgate.aggregation import AggregateResult
from signalgate.decision import DecisionConfig, Direction, Urgency, decide
from signalgate.labels import Label
from signalgate.risk import RiskGateConfig, RiskLevel, RiskProfile, size_position


def _agg(label: Label, confidence: float = 75.0, accuracy: float = 80.0) -> AggregateResult:
    return AggregateResult(
        overall_label=label,
        overall_confidence=confidence,
        accuracy_estimate=accuracy,
        component_breakdown=(),
    )


def _risk(level: RiskLevel = RiskLevel.LOW, score: float = 30.0) -> RiskProfile:
    return RiskProfile(
        risk_level=level,
        risk_score=score,
        volatility=0.01,
        volume_anomaly_ratio=1.0,
        position_sizing=size_position(0.02, level, RiskGateConfig()),
    )


# ---------------------------------------------------------------------------
# Passing trades
# ---------------------------------------------------------------------------


class TestTrade:
    def test_buy(self):
        d = decide(_agg(Label.BUY), _risk())
        assert d.should_trade
        assert d.direction is Direction.BUY
        assert d.blocked_by is None
        assert d.position_sizing is not None
        assert d.position_sizing.recommended_fraction <= 0.25

    def test_sell(self):
        d = decide(_agg(Label.STRONG_SELL), _risk())
        assert d.should_trade
        assert d.direction is Direction.SELL

    def test_sentiment_labels_map_to_direction(self):
        assert decide(_agg(Label.BULLISH), _risk()).direction is Direction.BUY
        assert decide(_agg(Label.BEARISH), _risk()).direction is Direction.SELL

    def test_explanation_mentions_inputs(self):
        d = decide(_agg(Label.BUY, 72, 81), _risk(RiskLevel.MEDIUM, 50))
        assert d.explanation.startswith("BUY:")
        assert "72% confidence" in d.explanation
        assert "accuracy 81%" in d.explanation
        assert "risk MEDIUM" in d.explanation

    @pytest.mark.parametrize("label,confidence,urgency", [
        (Label.STRONG_BUY, 81, Urgency.HIGH),
        (Label.STRONG_BUY, 80, Urgency.MEDIUM),
        (Label.BUY, 90, Urgency.MEDIUM),
        (Label.BUY, 70, Urgency.LOW),
        (Label.SELL, 65, Urgency.LOW),
    ])
    def test_urgency(self, label, confidence, urgency):
        assert decide(_agg(label, confidence), _risk()).urgency is urgency


# ---------------------------------------------------------------------------
# Blocking rules
# ---------------------------------------------------------------------------


class TestBlocked:
    def test_neutral(self):
        d = decide(_agg(Label.NEUTRAL, 90, 90), _risk())
        assert not d.should_trade
        assert d.direction is Direction.WAIT
        assert d.blocked_by == "neutral_label"
        assert d.urgency is Urgency.LOW
        assert d.position_sizing is None

    def test_confidence_floor_inclusive(self):
        assert decide(_agg(Label.BUY, 60), _risk()).should_trade
        d = decide(_agg(Label.BUY, 59.9), _risk())
        assert d.blocked_by == "confidence_floor"
        assert d.explanation.startswith("WAIT:")
        assert "Blocked:" in d.explanation

    def test_accuracy_floor_inclusive(self):
        assert decide(_agg(Label.BUY, 75, 65), _risk()).should_trade
        assert decide(_agg(Label.BUY, 75, 64.9), _risk()).blocked_by == "accuracy_floor"

    def test_extreme_risk(self):
        d = decide(_agg(Label.STRONG_BUY, 95, 95), _risk(RiskLevel.EXTREME, 100))
        assert d.blocked_by == "risk_ceiling"
        assert d.risk_level is RiskLevel.EXTREME

    def test_high_risk_still_trades(self):
        assert decide(_agg(Label.BUY), _risk(RiskLevel.HIGH, 80)).should_trade

    def test_blackout(self):
        d = decide(_agg(Label.BUY, 90), _risk(), calendar_blackout=True)
        assert d.blocked_by == "calendar_blackout"

    def test_blackout_override_needs_strong_label(self):
        d = decide(_agg(Label.STRONG_BUY, 86), _risk(), calendar_blackout=True)
        assert d.should_trade
        assert "overridden" in d.explanation

    def test_blackout_override_is_strict(self):
        d = decide(_agg(Label.STRONG_BUY, 85), _risk(), calendar_blackout=True)
        assert d.blocked_by == "calendar_blackout"

    def test_first_failing_rule_wins(self):
        d = decide(_agg(Label.BUY, 40, 50), _risk(RiskLevel.EXTREME, 100), calendar_blackout=True)
        assert d.blocked_by == "confidence_floor"

    def test_custom_floors(self):
        config = DecisionConfig(confidence_floor=80, accuracy_floor=50)
        assert decide(_agg(Label.BUY, 75, 60), _risk(), config=config).blocked_by == "confidence_floor"
        assert decide(_agg(Label.BUY, 85, 60), _risk(), config=config).should_trade


def test_no_trade_without_every_rule():
    """A trade is only ever emitted when every rule passes."""
    for label in Label:
        for confidence in (0, 59, 60, 85, 86, 100):
            for accuracy in (45, 64, 65, 95):
                for level in RiskLevel:
                    for blackout in (False, True):
                        d = decide(_agg(label, confidence, accuracy), _risk(level), blackout)
                        if d.should_trade:
                            assert label is not Label.NEUTRAL
                            assert confidence >= 60 and accuracy >= 65
                            assert level is not RiskLevel.EXTREME
                            assert not blackout or (label.is_strong and confidence > 85)
                        else:
                            assert d.direction is Direction.WAIT
                            assert d.blocked_by is not None
