"""Label vocabulary shared by every stage, and the fixed label→score scale."""

from __future__ import annotations

import enum
import math
from typing import Union

from signalgate.errors import InvariantViolation


class Bias(str, enum.Enum):
    """Directional bucket used for consensus counting."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Label(str, enum.Enum):
    """Trading labels plus the sentiment-domain BULLISH / BEARISH pair."""

    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    NEUTRAL = "NEUTRAL"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"

    @classmethod
    def parse(cls, value: Union[str, "Label"]) -> "Label":
        """Parse ``"strong buy"``, ``"STRONG_BUY"`` or a Label."""
        if isinstance(value, Label):
            return value
        key = str(value).strip().upper().replace(" ", "_").replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise InvariantViolation(f"Unknown label {value!r}") from None

    @property
    def score(self) -> float:
        return LABEL_SCORES[self]

    @property
    def bias(self) -> Bias:
        if self in (Label.STRONG_BUY, Label.BUY, Label.BULLISH):
            return Bias.BULLISH
        if self in (Label.STRONG_SELL, Label.SELL, Label.BEARISH):
            return Bias.BEARISH
        return Bias.NEUTRAL

    @property
    def is_strong(self) -> bool:
        return self in (Label.STRONG_BUY, Label.STRONG_SELL)


SENTIMENT_LABELS = (Label.BULLISH, Label.NEUTRAL, Label.BEARISH)

LABEL_SCORES: dict[Label, float] = {
    Label.STRONG_BUY: 100.0,
    Label.BUY: 75.0,
    Label.BULLISH: 75.0,
    Label.NEUTRAL: 50.0,
    Label.SELL: 25.0,
    Label.BEARISH: 25.0,
    Label.STRONG_SELL: 0.0,
}

STRONG_BUY_THRESHOLD = 85.0
BUY_THRESHOLD = 65.0
SELL_THRESHOLD = 35.0
STRONG_SELL_THRESHOLD = 15.0


def label_from_score(score: float) -> Label:
    """Map a 0–100 score back to a trading label."""
    if score >= STRONG_BUY_THRESHOLD:
        return Label.STRONG_BUY
    if score >= BUY_THRESHOLD:
        return Label.BUY
    if score <= STRONG_SELL_THRESHOLD:
        return Label.STRONG_SELL
    if score <= SELL_THRESHOLD:
        return Label.SELL
    return Label.NEUTRAL


def clamp_confidence(value: float) -> float:
    """Clamp a computed confidence into [0, 100].

    For values produced inside the engine only; records built from
    out-of-contract input must fail in ``SignalSource`` instead.
    """
    if math.isnan(value):
        raise InvariantViolation("confidence is NaN")
    return max(0.0, min(100.0, float(value)))
