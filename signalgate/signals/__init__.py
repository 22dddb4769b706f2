"""Signal sources: each reduces one analytical view to a labelled, weighted vote."""

from signalgate.signals.types import SignalSource, no_vote
from signalgate.signals.technical import combine_readings, technical_signal
from signalgate.signals.sentiment import (
    SentimentSource,
    blend_sentiment,
    price_action_sentiment,
)
from signalgate.signals.patterns import Pattern, detect_candlesticks, detect_geometry, pattern_signal
from signalgate.signals.structure import MarketStructure, Trend, analyze_structure, structure_signal
from signalgate.signals.risk import risk_signal, trade_bias
from signalgate.signals.calendar import (
    CalendarAssessment,
    assess_calendar,
    impact_score,
    is_blackout,
    risk_periods,
)
from signalgate.signals.backtest import PerformanceMetrics, backtest_signal, compute_performance

__all__ = [
    "SignalSource",
    "no_vote",
    "combine_readings",
    "technical_signal",
    "SentimentSource",
    "blend_sentiment",
    "price_action_sentiment",
    "Pattern",
    "detect_candlesticks",
    "detect_geometry",
    "pattern_signal",
    "MarketStructure",
    "Trend",
    "analyze_structure",
    "structure_signal",
    "risk_signal",
    "trade_bias",
    "CalendarAssessment",
    "assess_calendar",
    "impact_score",
    "is_blackout",
    "risk_periods",
    "PerformanceMetrics",
    "backtest_signal",
    "compute_performance",
]
