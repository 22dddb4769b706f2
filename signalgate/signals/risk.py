"""Risk source: the risk score as direction-neutral avoidance pressure."""

from __future__ import annotations

from signalgate.labels import Label
from signalgate.risk.gate import RiskLevel, RiskProfile
from .types import SignalSource

SOURCE_NAME = "risk"


def trade_bias(profile: RiskProfile) -> str:
    if profile.risk_level is RiskLevel.EXTREME:
        return "AVOID"
    if profile.risk_score < 40:
        return "FAVOR_TRADING"
    return "CAUTION"


def risk_signal(profile: RiskProfile, weight: float = 1.0) -> SignalSource:
    """NEUTRAL vote whose confidence is the risk score.

    A calm market barely dilutes the directional sources; a turbulent one
    pulls the aggregate toward NEUTRAL.
    """
    return SignalSource(
        source_name=SOURCE_NAME,
        label=Label.NEUTRAL,
        confidence=profile.risk_score,
        weight=weight,
        metadata={
            "risk_level": profile.risk_level.value,
            "trade_bias": trade_bias(profile),
            "volatility": profile.volatility,
            "volume_anomaly_ratio": profile.volume_anomaly_ratio,
        },
    )
