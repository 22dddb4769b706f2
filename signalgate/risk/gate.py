"""Risk gate: volatility and volume anomalies → risk tier and position plan."""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from signalgate.indicators.impl.atr import ATR
from signalgate.market.bars import require_bars

log = logging.getLogger(__name__)


class RiskLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"

    @property
    def rank(self) -> int:
        return list(RiskLevel).index(self)

    def escalate(self) -> "RiskLevel":
        order = list(RiskLevel)
        return order[min(self.rank + 1, len(order) - 1)]


# two returns for a sample stdev
MIN_BARS = 3

TIER_SCALE = {
    RiskLevel.LOW: 1.0,
    RiskLevel.MEDIUM: 1.0,
    RiskLevel.HIGH: 0.5,
    RiskLevel.EXTREME: 0.25,
}


@dataclass(frozen=True)
class RiskGateConfig:
    """Risk-gate parameters, read from the ``risk`` section of the config.

    ``risk_per_trade`` and ``max_position_fraction`` are fractions of
    capital; the fraction ceiling holds for every input.
    """

    window: int = 20
    volume_window: int = 20
    annualization_factor: Optional[float] = None
    volume_anomaly_low: float = 0.3
    volume_anomaly_high: float = 3.0
    volume_anomaly_penalty: float = 20.0
    atr_period: int = 14
    stop_atr_multiple: float = 2.0
    risk_per_trade: float = 0.01
    max_position_fraction: float = 0.25

    def __post_init__(self) -> None:
        if self.window < 2:
            raise ValueError(f"risk.window must be >= 2, got {self.window}")
        if not 0 < self.max_position_fraction <= 1:
            raise ValueError(
                f"risk.max_position_fraction must be in (0, 1], got {self.max_position_fraction}"
            )
        if self.risk_per_trade <= 0:
            raise ValueError(f"risk.risk_per_trade must be > 0, got {self.risk_per_trade}")
        if self.volume_anomaly_low >= self.volume_anomaly_high:
            raise ValueError("risk.volume_anomaly_low must be below risk.volume_anomaly_high")


@dataclass(frozen=True)
class PositionSizing:
    """Distances are fractions of the entry price."""

    recommended_fraction: float
    stop_distance: float
    take_profit_distances: Tuple[float, ...]
    trailing_stop_distance: float
    risk_fraction: float


@dataclass(frozen=True)
class RiskProfile:
    risk_level: RiskLevel
    risk_score: float
    volatility: float
    volume_anomaly_ratio: float
    position_sizing: PositionSizing
    atr: Optional[float] = None
    annualized_volatility: Optional[float] = None
    recommendation: str = ""


def volatility_band(volatility: float) -> tuple[RiskLevel, float]:
    """Base tier and score from the per-bar return stdev."""
    if volatility > 0.05:
        return RiskLevel.HIGH, 80.0
    if volatility > 0.03:
        return RiskLevel.MEDIUM, 60.0
    if volatility > 0.02:
        return RiskLevel.MEDIUM, 50.0
    return RiskLevel.LOW, 30.0


def tier_from_score(score: float) -> RiskLevel:
    if score >= 90:
        return RiskLevel.EXTREME
    if score >= 70:
        return RiskLevel.HIGH
    if score >= 40:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def size_position(stop_distance: float, level: RiskLevel, config: RiskGateConfig) -> PositionSizing:
    """Fixed-fractional sizing, scaled down by tier and capped at the ceiling.

    A zero, negative or non-finite stop distance sizes at the ceiling.
    """
    cap = config.max_position_fraction
    if not math.isfinite(stop_distance) or stop_distance <= 0:
        stop_distance = 0.0
        fraction = cap
    else:
        fraction = min(cap, config.risk_per_trade / stop_distance * TIER_SCALE[level])

    return PositionSizing(
        recommended_fraction=fraction,
        stop_distance=stop_distance,
        take_profit_distances=(stop_distance * 1.5, stop_distance * 2.0, stop_distance * 3.0),
        trailing_stop_distance=stop_distance * 0.7,
        risk_fraction=fraction * stop_distance,
    )


def recommend(level: RiskLevel, score: float, volatility: float) -> str:
    text = f"Risk level {level.value} (score {score:.0f}/100). "
    if level is RiskLevel.EXTREME:
        text += "Avoid trading or use minimal position sizes."
    elif level is RiskLevel.HIGH:
        text += "Reduce position sizes by 50%."
    elif level is RiskLevel.MEDIUM:
        text += "Use standard position sizing with tight stops."
    else:
        text += "Favorable conditions for normal position sizing."
    if volatility > 0.05:
        text += " High volatility: use wider stops and smaller positions."
    return text


def _last_atr(ohlcv: pd.DataFrame, period: int) -> Optional[float]:
    ind = ATR(period)
    if len(ohlcv) < ind.lookback:
        return None
    value = float(ind.compute(ohlcv).iloc[-1, 0])
    return value if math.isfinite(value) else None


def assess_risk(ohlcv: pd.DataFrame, config: Optional[RiskGateConfig] = None) -> RiskProfile:
    """Classify the window's risk and size a position for it.

    Raises
    ------
    InsufficientDataError
        Fewer than three bars. Shorter windows than ``window + 1`` use
        every return available.
    """
    config = config or RiskGateConfig()
    require_bars(ohlcv, MIN_BARS, "risk gate")

    closes = ohlcv["close"].astype(np.float64)
    volumes = ohlcv["volume"].astype(np.float64)

    volatility = float(closes.pct_change().dropna().iloc[-config.window:].std())
    if not math.isfinite(volatility):
        volatility = 0.0

    avg_volume = float(volumes.iloc[-config.volume_window:].mean())
    volume_ratio = float(volumes.iloc[-1]) / avg_volume if avg_volume > 0 else 1.0

    level, score = volatility_band(volatility)
    if not config.volume_anomaly_low <= volume_ratio <= config.volume_anomaly_high:
        log.info("Volume anomaly: ratio %.2f outside [%.2f, %.2f]",
                 volume_ratio, config.volume_anomaly_low, config.volume_anomaly_high)
        score = min(100.0, score + config.volume_anomaly_penalty)
        level = level.escalate()

    atr = _last_atr(ohlcv, config.atr_period)
    price = float(closes.iloc[-1])
    if atr is not None and price > 0:
        stop = config.stop_atr_multiple * atr / price
    else:
        stop = config.stop_atr_multiple * volatility

    annualized = None
    if config.annualization_factor:
        annualized = volatility * math.sqrt(config.annualization_factor)

    return RiskProfile(
        risk_level=level,
        risk_score=score,
        volatility=volatility,
        volume_anomaly_ratio=volume_ratio,
        position_sizing=size_position(stop, level, config),
        atr=atr,
        annualized_volatility=annualized,
        recommendation=recommend(level, score, volatility),
    )


def adjust_for_events(
    profile: RiskProfile,
    impact_score: float,
    config: Optional[RiskGateConfig] = None,
) -> RiskProfile:
    """Raise risk ahead of a heavy economic calendar; never lowers the tier."""
    if impact_score > 20:
        bump = 20.0
    elif impact_score > 10:
        bump = 10.0
    else:
        return profile

    config = config or RiskGateConfig()
    score = min(100.0, profile.risk_score + bump)
    level = tier_from_score(score)
    if level.rank < profile.risk_level.rank:
        level = profile.risk_level

    sizing = profile.position_sizing
    if level is not profile.risk_level:
        sizing = size_position(sizing.stop_distance, level, config)

    return dataclasses.replace(
        profile,
        risk_level=level,
        risk_score=score,
        position_sizing=sizing,
        recommendation=recommend(level, score, profile.volatility),
    )
