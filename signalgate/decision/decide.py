"""Trade gate: turns an aggregate and a risk profile into go / no-go."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from signalgate.aggregation.aggregator import AggregateResult
from signalgate.labels import Bias, Label
from signalgate.risk.gate import PositionSizing, RiskLevel, RiskProfile


class Direction(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"
    WAIT = "WAIT"


class Urgency(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class DecisionConfig:
    """Gate thresholds, read from the ``decision`` section of the config."""

    confidence_floor: float = 60.0
    accuracy_floor: float = 65.0
    blackout_override_confidence: float = 85.0
    high_urgency_confidence: float = 80.0
    medium_urgency_confidence: float = 70.0


@dataclass(frozen=True)
class TradeDecision:
    should_trade: bool
    direction: Direction
    urgency: Urgency
    risk_level: RiskLevel
    explanation: str
    blocked_by: Optional[str] = None
    position_sizing: Optional[PositionSizing] = None


def _direction(label: Label) -> Direction:
    if label.bias is Bias.BULLISH:
        return Direction.BUY
    if label.bias is Bias.BEARISH:
        return Direction.SELL
    return Direction.WAIT


def _urgency(label: Label, confidence: float, config: DecisionConfig) -> Urgency:
    if label.is_strong and confidence > config.high_urgency_confidence:
        return Urgency.HIGH
    if confidence > config.medium_urgency_confidence:
        return Urgency.MEDIUM
    return Urgency.LOW


def _blocking_rule(
    agg: AggregateResult,
    risk: RiskProfile,
    calendar_blackout: bool,
    config: DecisionConfig,
) -> Optional[tuple[str, str]]:
    """First failing rule as ``(rule, reason)``, or ``None`` when all pass."""
    label = agg.overall_label
    if label is Label.NEUTRAL:
        return "neutral_label", "no directional edge"
    if agg.overall_confidence < config.confidence_floor:
        return "confidence_floor", (
            f"confidence {agg.overall_confidence:.0f}% below floor {config.confidence_floor:.0f}%"
        )
    if agg.accuracy_estimate < config.accuracy_floor:
        return "accuracy_floor", (
            f"accuracy estimate {agg.accuracy_estimate:.0f}% below floor {config.accuracy_floor:.0f}%"
        )
    if risk.risk_level is RiskLevel.EXTREME:
        return "risk_ceiling", "risk is EXTREME"
    if calendar_blackout and not (
        label.is_strong and agg.overall_confidence > config.blackout_override_confidence
    ):
        return "calendar_blackout", "high-impact economic event inside the blackout window"
    return None


def decide(
    agg: AggregateResult,
    risk: RiskProfile,
    calendar_blackout: bool = False,
    config: Optional[DecisionConfig] = None,
) -> TradeDecision:
    """Apply the gating rules in order; the first failing rule blocks the trade.

    Rules: a directional label, confidence at or above the floor, accuracy
    at or above the floor, risk below EXTREME, and no calendar blackout
    unless the label is STRONG with confidence above the override level.
    """
    config = config or DecisionConfig()
    label = agg.overall_label
    summary = (
        f"{label.value} at {agg.overall_confidence:.0f}% confidence "
        f"(accuracy {agg.accuracy_estimate:.0f}%), risk {risk.risk_level.value}"
    )

    blocked = _blocking_rule(agg, risk, calendar_blackout, config)
    if blocked is not None:
        rule, reason = blocked
        return TradeDecision(
            should_trade=False,
            direction=Direction.WAIT,
            urgency=Urgency.LOW,
            risk_level=risk.risk_level,
            explanation=f"WAIT: {summary}. Blocked: {reason}.",
            blocked_by=rule,
        )

    direction = _direction(label)
    sizing = risk.position_sizing
    explanation = (
        f"{direction.value}: {summary}. "
        f"Size {sizing.recommended_fraction:.1%} of capital, stop {sizing.stop_distance:.2%}."
    )
    if calendar_blackout:
        explanation += " Calendar blackout overridden by a strong signal."

    return TradeDecision(
        should_trade=True,
        direction=direction,
        urgency=_urgency(label, agg.overall_confidence, config),
        risk_level=risk.risk_level,
        explanation=explanation,
        position_sizing=sizing,
    )
