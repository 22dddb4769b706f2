"""Label vocabulary and SignalSource construction invariants."""

from __future__ import annotations

import math

import pytest

from signalgate.errors import InvariantViolation
from signalgate.labels import Bias, Label, clamp_confidence, label_from_score
from signalgate.signals import SignalSource, no_vote


# ---------------------------------------------------------------------------
# Label
# ---------------------------------------------------------------------------


class TestLabel:
    @pytest.mark.parametrize("raw", ["STRONG_BUY", "strong buy", "Strong-Buy", Label.STRONG_BUY])
    def test_parse(self, raw):
        assert Label.parse(raw) is Label.STRONG_BUY

    def test_parse_unknown(self):
        with pytest.raises(InvariantViolation, match="Unknown label"):
            Label.parse("MOON")

    def test_scores(self):
        assert Label.STRONG_BUY.score == 100
        assert Label.BUY.score == Label.BULLISH.score == 75
        assert Label.NEUTRAL.score == 50
        assert Label.SELL.score == Label.BEARISH.score == 25
        assert Label.STRONG_SELL.score == 0

    def test_bias(self):
        assert Label.BULLISH.bias is Bias.BULLISH
        assert Label.STRONG_SELL.bias is Bias.BEARISH
        assert Label.NEUTRAL.bias is Bias.NEUTRAL

    @pytest.mark.parametrize("score,expected", [
        (100, Label.STRONG_BUY),
        (85, Label.STRONG_BUY),
        (84.99, Label.BUY),
        (65, Label.BUY),
        (64.99, Label.NEUTRAL),
        (50, Label.NEUTRAL),
        (35.01, Label.NEUTRAL),
        (35, Label.SELL),
        (15.01, Label.SELL),
        (15, Label.STRONG_SELL),
        (0, Label.STRONG_SELL),
    ])
    def test_label_from_score(self, score, expected):
        assert label_from_score(score) is expected

    def test_clamp_confidence(self):
        assert clamp_confidence(120) == 100.0
        assert clamp_confidence(-3) == 0.0
        with pytest.raises(InvariantViolation):
            clamp_confidence(math.nan)


# ---------------------------------------------------------------------------
# SignalSource
# ---------------------------------------------------------------------------


class TestSignalSource:
    def test_valid(self):
        s = SignalSource("technical", Label.BUY, 70.0, 0.3)
        assert s.is_active
        assert s.effective_weight == pytest.approx(0.21)

    @pytest.mark.parametrize("confidence", [-0.1, 100.1, math.nan])
    def test_confidence_out_of_range(self, confidence):
        with pytest.raises(InvariantViolation, match="confidence"):
            SignalSource("x", Label.BUY, confidence, 0.5)

    @pytest.mark.parametrize("weight", [-0.1, 1.5, math.nan])
    def test_weight_out_of_range(self, weight):
        with pytest.raises(InvariantViolation, match="weight"):
            SignalSource("x", Label.BUY, 50.0, weight)

    def test_label_must_be_enum(self):
        with pytest.raises(InvariantViolation, match="label"):
            SignalSource("x", "BUY", 50.0, 0.5)

    def test_zero_weight_is_not_active(self):
        assert not SignalSource("x", Label.BUY, 50.0, 0.0).is_active

    def test_no_vote(self):
        s = no_vote("calendar", 0.1, "feed down")
        assert s.label is Label.NEUTRAL
        assert s.confidence == 0.0
        assert not s.is_active
        assert s.metadata["reason"] == "feed down"
