"""Market-structure source: moving-average trend and key price levels."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from .types import SignalSource

SOURCE_NAME = "structure"

TREND_PERIODS = (20, 50, 200)
PIVOT_SPAN = 2
MAX_LEVELS = 3


class Trend(str, enum.Enum):
    UPTREND = "UPTREND"
    DOWNTREND = "DOWNTREND"
    SIDEWAYS = "SIDEWAYS"


@dataclass(frozen=True)
class MarketStructure:
    trend: Trend
    strength: float
    support: Tuple[float, ...]
    resistance: Tuple[float, ...]
    breakout_probability: float
    order_flow: str


def _sma_last(closes: np.ndarray, period: int) -> Optional[float]:
    if len(closes) < period:
        return None
    return float(closes[-period:].mean())


def classify_trend(closes: np.ndarray) -> tuple[Trend, float]:
    """Trend from the ordering of price and SMA 20 / 50 / 200.

    Full stack scores 85, a price/20/50 stack 65, anything else is
    SIDEWAYS at 40. SMA200 only participates once enough bars exist.
    """
    price = float(closes[-1])
    sma20, sma50, sma200 = (_sma_last(closes, p) for p in TREND_PERIODS)
    if sma20 is None or sma50 is None:
        return Trend.SIDEWAYS, 40.0

    if sma200 is not None:
        if price > sma20 > sma50 > sma200:
            return Trend.UPTREND, 85.0
        if price < sma20 < sma50 < sma200:
            return Trend.DOWNTREND, 85.0
    if price > sma20 > sma50:
        return Trend.UPTREND, 65.0
    if price < sma20 < sma50:
        return Trend.DOWNTREND, 65.0
    return Trend.SIDEWAYS, 40.0


def local_extrema(values: np.ndarray, span: int = PIVOT_SPAN, highs: bool = True) -> list:
    """Values strictly above (or below) their *span* neighbours on each side."""
    out = []
    for i in range(span, len(values) - span):
        neighbours = np.concatenate([values[i - span:i], values[i + 1:i + 1 + span]])
        if highs and (values[i] > neighbours).all():
            out.append(float(values[i]))
        elif not highs and (values[i] < neighbours).all():
            out.append(float(values[i]))
    return out


def key_levels(highs: np.ndarray, lows: np.ndarray, price: float) -> tuple[Tuple[float, ...], Tuple[float, ...]]:
    """Nearest pivot supports below and resistances above *price*."""
    support = {float(f"{v:.6g}") for v in local_extrema(lows, highs=False) if v <= price}
    resistance = {float(f"{v:.6g}") for v in local_extrema(highs, highs=True) if v >= price}
    return (
        tuple(sorted(support, reverse=True)[:MAX_LEVELS]),
        tuple(sorted(resistance)[:MAX_LEVELS]),
    )


def breakout_probability(closes: np.ndarray) -> float:
    """Recent 10-bar range against the mean absolute bar move, capped at 90."""
    recent = closes[-10:]
    moves = np.abs(np.diff(closes[-20:]))
    if len(moves) == 0 or moves.mean() == 0:
        return 0.0
    return float(min(90.0, (recent.max() - recent.min()) / moves.mean() * 50))


def order_flow(closes: np.ndarray, volumes: np.ndarray) -> str:
    """Direction of the last five bars when they trade on above-average volume."""
    movement = closes[-1] - closes[-5]
    heavy = volumes[-5:].mean() > volumes.mean() * 1.1
    if heavy and movement > 0:
        return "BULLISH"
    if heavy and movement < 0:
        return "BEARISH"
    return "NEUTRAL"


def analyze_structure(ohlcv: pd.DataFrame) -> MarketStructure:
    require_bars(ohlcv, TREND_PERIODS[0], "market structure")
    closes = ohlcv["close"].to_numpy(dtype=np.float64)
    highs = ohlcv["high"].to_numpy(dtype=np.float64)
    lows = ohlcv["low"].to_numpy(dtype=np.float64)
    volumes = ohlcv["volume"].to_numpy(dtype=np.float64)

    trend, strength = classify_trend(closes)
    support, resistance = key_levels(highs, lows, float(closes[-1]))

    return MarketStructure(
        trend=trend,
        strength=strength,
        support=support,
        resistance=resistance,
        breakout_probability=breakout_probability(closes),
        order_flow=order_flow(closes, volumes),
    )


def structure_label(trend: Trend, strength: float) -> Label:
    if trend is Trend.UPTREND:
        return Label.STRONG_BUY if strength > 70 else Label.BUY
    if trend is Trend.DOWNTREND:
        return Label.STRONG_SELL if strength > 70 else Label.SELL
    return Label.NEUTRAL


def structure_signal(ohlcv: pd.DataFrame, weight: float = 1.0) -> SignalSource:
    ms = analyze_structure(ohlcv)
    return SignalSource(
        source_name=SOURCE_NAME,
        label=structure_label(ms.trend, ms.strength),
        confidence=ms.strength,
        weight=weight,
        metadata={
            "trend": ms.trend.value,
            "support": list(ms.support),
            "resistance": list(ms.resistance),
            "breakout_probability": ms.breakout_probability,
            "order_flow": ms.order_flow,
        },
    )
