"""Pattern source: candlestick and geometric detectors with fixed reliabilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd

from signalgate.labels import Bias, Label
from .types import SignalSource, no_vote

SOURCE_NAME = "patterns"

CANDLE_BARS = 3
GEOMETRY_BARS = 10

# relative tolerances (fraction of price)
LEVEL_TOLERANCE = 0.0005
BREAKOUT_MARGIN = 0.005
CONSOLIDATION_RANGE = 0.005


@dataclass(frozen=True)
class Pattern:
    name: str
    bias: Bias
    reliability: float
    description: str = ""


DOJI = Pattern("Doji", Bias.NEUTRAL, 75, "Indecision, potential reversal")
HAMMER = Pattern("Hammer", Bias.BULLISH, 80, "Bullish reversal candle")
SHOOTING_STAR = Pattern("Shooting Star", Bias.BEARISH, 80, "Bearish reversal candle")
BULLISH_ENGULFING = Pattern("Bullish Engulfing", Bias.BULLISH, 85, "Strong bullish reversal")
BEARISH_ENGULFING = Pattern("Bearish Engulfing", Bias.BEARISH, 85, "Strong bearish reversal")
MORNING_STAR = Pattern("Morning Star", Bias.BULLISH, 90, "Three-candle bullish reversal")
EVENING_STAR = Pattern("Evening Star", Bias.BEARISH, 90, "Three-candle bearish reversal")
DOUBLE_TOP = Pattern("Double Top", Bias.BEARISH, 75, "Two rejections at the same high")
DOUBLE_BOTTOM = Pattern("Double Bottom", Bias.BULLISH, 75, "Two rejections at the same low")
SUPPORT_BREAKOUT = Pattern("Support Breakout", Bias.BULLISH, 80, "Price lifting away from recent lows")
TRIANGLE = Pattern("Triangle Consolidation", Bias.NEUTRAL, 70, "Narrowing range")


def detect_candlesticks(ohlcv: pd.DataFrame) -> List[Pattern]:
    """Single- and multi-candle patterns on the last three bars."""
    if len(ohlcv) < CANDLE_BARS:
        return []

    o, h, l, c = (ohlcv[col].to_numpy(dtype=np.float64)[-CANDLE_BARS:] for col in ("open", "high", "low", "close"))
    found: List[Pattern] = []

    body = abs(c[2] - o[2])
    rng = h[2] - l[2]
    lower_shadow = min(o[2], c[2]) - l[2]
    upper_shadow = h[2] - max(o[2], c[2])

    if rng > 0 and body < rng * 0.1:
        found.append(DOJI)
    if body > 0 and lower_shadow > body * 2 and upper_shadow < body * 0.5:
        found.append(HAMMER)
    if body > 0 and upper_shadow > body * 2 and lower_shadow < body * 0.5:
        found.append(SHOOTING_STAR)

    prev_bearish = c[1] < o[1]
    prev_bullish = c[1] > o[1]
    if prev_bearish and c[2] > o[2] and o[2] < c[1] and c[2] > o[1]:
        found.append(BULLISH_ENGULFING)
    if prev_bullish and c[2] < o[2] and o[2] > c[1] and c[2] < o[1]:
        found.append(BEARISH_ENGULFING)

    first_body = abs(c[0] - o[0])
    small_middle = abs(c[1] - o[1]) < first_body * 0.3
    first_mid = (o[0] + c[0]) / 2
    if c[0] < o[0] and small_middle and c[2] > o[2] and c[2] > first_mid:
        found.append(MORNING_STAR)
    if c[0] > o[0] and small_middle and c[2] < o[2] and c[2] < first_mid:
        found.append(EVENING_STAR)

    return found


def _repeated_extreme(values: np.ndarray, extreme: float) -> bool:
    """Two touches of *extreme* at least two bars apart."""
    touches = np.flatnonzero(np.abs(values - extreme) <= abs(extreme) * LEVEL_TOLERANCE)
    return len(touches) >= 2 and touches[-1] - touches[0] >= 2


def detect_geometry(ohlcv: pd.DataFrame) -> List[Pattern]:
    """Multi-bar chart patterns over the last ten bars."""
    if len(ohlcv) < GEOMETRY_BARS:
        return []

    highs = ohlcv["high"].to_numpy(dtype=np.float64)[-GEOMETRY_BARS:]
    lows = ohlcv["low"].to_numpy(dtype=np.float64)[-GEOMETRY_BARS:]
    price = float(ohlcv["close"].iloc[-1])
    found: List[Pattern] = []

    if _repeated_extreme(highs, highs.max()):
        found.append(DOUBLE_TOP)
    if _repeated_extreme(lows, lows.min()):
        found.append(DOUBLE_BOTTOM)

    recent_low = lows[-5:].min()
    if price > recent_low * (1 + BREAKOUT_MARGIN):
        found.append(SUPPORT_BREAKOUT)

    if highs.max() - highs[-5:].min() < price * CONSOLIDATION_RANGE:
        found.append(TRIANGLE)

    return found


def bullish_share(patterns: List[Pattern]) -> float:
    """Reliability-weighted share of bullish patterns among directional ones, in %."""
    bullish = sum(p.reliability / 100 for p in patterns if p.bias is Bias.BULLISH)
    bearish = sum(p.reliability / 100 for p in patterns if p.bias is Bias.BEARISH)
    total = bullish + bearish
    return bullish / total * 100 if total > 0 else 50.0


def label_share(share: float) -> tuple[Label, float]:
    if share > 75:
        return Label.STRONG_BUY, 85.0
    if share > 60:
        return Label.BUY, 70.0
    if share < 25:
        return Label.STRONG_SELL, 85.0
    if share < 40:
        return Label.SELL, 70.0
    return Label.NEUTRAL, 50.0


def pattern_signal(ohlcv: pd.DataFrame, weight: float = 1.0) -> SignalSource:
    if len(ohlcv) < CANDLE_BARS:
        return no_vote(SOURCE_NAME, weight, "not enough bars for pattern detection")

    patterns = detect_candlesticks(ohlcv) + detect_geometry(ohlcv)
    share = bullish_share(patterns)
    label, confidence = label_share(share)

    return SignalSource(
        source_name=SOURCE_NAME,
        label=label,
        confidence=confidence,
        weight=weight,
        metadata={
            "bullish_share": share,
            "patterns": [
                {"name": p.name, "bias": p.bias.value, "reliability": p.reliability}
                for p in patterns
            ],
        },
    )
