"""Risk package: drawdown math and the volatility / volume risk gate."""

from signalgate.risk.drawdown import DrawdownState, DrawdownTracker, compute_drawdown_pct, max_drawdown
from signalgate.risk.gate import (
    PositionSizing,
    RiskGateConfig,
    RiskLevel,
    RiskProfile,
    adjust_for_events,
    assess_risk,
    size_position,
    tier_from_score,
    volatility_band,
)

__all__ = [
    "DrawdownState",
    "DrawdownTracker",
    "compute_drawdown_pct",
    "max_drawdown",
    "PositionSizing",
    "RiskGateConfig",
    "RiskLevel",
    "RiskProfile",
    "adjust_for_events",
    "assess_risk",
    "size_position",
    "tier_from_score",
    "volatility_band",
]
