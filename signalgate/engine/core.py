"""AnalysisEngine: one snapshot in, one gated trade decision out.

Orchestrates the per-request pipeline:
  price source → indicators → signal sources (concurrent) → aggregate
  + risk gate → decision

Every call builds its own snapshot and result objects; the engine holds
configuration and collaborators only, so overlapping calls are safe.
"""

from __future__ import annotations

import concurrent.futures
import dataclasses
import enum
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

import pandas as pd

from signalgate.aggregation import AggregateResult, aggregate
from signalgate.config import EngineConfig
from signalgate.decision import Direction, TradeDecision, Urgency, decide
from signalgate.errors import InsufficientDataError, InvariantViolation, UpstreamUnavailableError
from signalgate.indicators import IndicatorPipeline, default_indicators
from signalgate.market.bars import bars_to_frame, require_bars
from signalgate.market.protocols import CalendarFeed, PriceSource, SentimentProvider
from signalgate.risk import RiskLevel, RiskProfile, adjust_for_events, assess_risk
from signalgate.signals import (
    CalendarAssessment,
    PerformanceMetrics,
    SentimentSource,
    SignalSource,
    assess_calendar,
    backtest_signal,
    no_vote,
    pattern_signal,
    risk_signal,
    structure_signal,
    technical_signal,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisReport:
    """Everything one analysis produced, for logging, JSON and plotting."""

    symbol: str
    timeframe: str
    generated_at: datetime
    bars: int
    last_close: float
    sources: tuple
    aggregate: AggregateResult
    risk: RiskProfile
    calendar: Optional[CalendarAssessment]
    decision: TradeDecision

    def source(self, name: str) -> Optional[SignalSource]:
        return next((s for s in self.sources if s.source_name == name), None)

    def to_dict(self) -> dict:
        return _jsonable(self)


def _jsonable(obj: Any) -> Any:
    """Dataclasses, enums and datetimes → plain JSON types."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: _jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (datetime, pd.Timestamp)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(v) for v in obj]
    if isinstance(obj, float) and math.isnan(obj):
        return None
    return obj


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisEngine:
    """Runs the full signal → aggregate → gate pipeline for one symbol.

    Parameters
    ----------
    price_source : PriceSource
        Required bar provider.
    config : EngineConfig, optional
        Defaults to ``EngineConfig()``.
    sentiment_provider : SentimentProvider, optional
        External opinion; the price-action fallback is used without one.
    calendar_feed : CalendarFeed, optional
        Economic calendar; without one the calendar source abstains.
    performance : PerformanceMetrics, optional
        Backtest record of the strategy being gated.
    clock : callable, optional
        Returns the tz-aware "now" used for calendar windows.
    """

    def __init__(
        self,
        price_source: PriceSource,
        config: Optional[EngineConfig] = None,
        sentiment_provider: Optional[SentimentProvider] = None,
        calendar_feed: Optional[CalendarFeed] = None,
        performance: Optional[PerformanceMetrics] = None,
        clock: Optional[Callable[[], datetime]] = None,
        indicators: Optional[Sequence] = None,
    ) -> None:
        self.price_source = price_source
        self.config = config or EngineConfig()
        self.calendar_feed = calendar_feed
        self.performance = performance
        self.clock = clock or _utcnow

        self.pipeline = IndicatorPipeline(
            list(indicators) if indicators is not None else default_indicators(),
            min_bars=self.config.analysis.min_bars,
        )
        self.sentiment = SentimentSource(
            provider=sentiment_provider,
            timeout_seconds=self.config.sentiment.timeout_seconds,
            ai_confidence_boost=self.config.sentiment.ai_confidence_boost,
            weight=self.config.weights.sentiment,
        )

    # -- public API ----------------------------------------------------------

    def analyze(self, symbol: str, timeframe: str) -> AnalysisReport:
        """Full report for the latest window of *symbol* / *timeframe*.

        Raises
        ------
        UpstreamUnavailableError
            The price source failed or returned nothing.
        InsufficientDataError
            Fewer bars than ``analysis.min_bars``.
        """
        ohlcv = self._load(symbol, timeframe)
        now = self.clock()
        weights = self.config.weights

        calendar = self._calendar(now)

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self.config.analysis.max_workers,
        ) as pool:
            technical = pool.submit(self._technical, ohlcv)
            sentiment = pool.submit(
                self._guarded, "sentiment", weights.sentiment,
                self.sentiment.evaluate, ohlcv, symbol, timeframe,
            )
            patterns = pool.submit(
                self._guarded, "patterns", weights.patterns, pattern_signal, ohlcv, weights.patterns,
            )
            structure = pool.submit(
                self._guarded, "structure", weights.structure, structure_signal, ohlcv, weights.structure,
            )
            risk_future = pool.submit(assess_risk, ohlcv, self.config.risk)

            risk = risk_future.result()
            sources = [
                technical.result(),
                sentiment.result(),
                patterns.result(),
                structure.result(),
            ]

        impact = None
        blackout = self.config.calendar.blackout_on_failure
        if calendar is not None:
            impact = calendar.impact_score
            blackout = calendar.blackout
            risk = adjust_for_events(risk, impact, self.config.risk)
            calendar_source = calendar.source
        elif self.calendar_feed is None:
            blackout = False
            calendar_source = no_vote("calendar", weights.calendar, "no calendar feed")
        else:
            calendar_source = no_vote("calendar", weights.calendar, "calendar unavailable")

        sources.append(risk_signal(risk, weights.risk))
        sources.append(calendar_source)
        sources.append(backtest_signal(self.performance, weights.backtest))

        agg = aggregate(sources, data_points=len(ohlcv), calendar_impact=impact)
        decision = decide(agg, risk, blackout, self.config.decision)

        log.info(
            "%s %s: %s (label=%s confidence=%.0f accuracy=%.0f risk=%s)",
            symbol, timeframe, decision.direction.value, agg.overall_label.value,
            agg.overall_confidence, agg.accuracy_estimate, risk.risk_level.value,
        )
        if decision.blocked_by:
            log.info("Trade blocked by %s", decision.blocked_by)

        return AnalysisReport(
            symbol=symbol,
            timeframe=timeframe,
            generated_at=now,
            bars=len(ohlcv),
            last_close=float(ohlcv["close"].iloc[-1]),
            sources=tuple(sources),
            aggregate=agg,
            risk=risk,
            calendar=calendar,
            decision=decision,
        )

    def run_analysis(self, symbol: str, timeframe: str) -> TradeDecision:
        """Decision only. An unavailable price source yields WAIT at EXTREME risk."""
        try:
            return self.analyze(symbol, timeframe).decision
        except UpstreamUnavailableError as exc:
            log.warning("%s %s: market data unavailable (%s)", symbol, timeframe, exc)
            return TradeDecision(
                should_trade=False,
                direction=Direction.WAIT,
                urgency=Urgency.LOW,
                risk_level=RiskLevel.EXTREME,
                explanation=f"WAIT: market data unavailable ({exc}).",
                blocked_by="market_data",
            )

    # -- stages --------------------------------------------------------------

    def _load(self, symbol: str, timeframe: str) -> pd.DataFrame:
        count = self.config.analysis.bar_count
        try:
            bars = self.price_source.get_recent_bars(symbol, timeframe, count)
        except (UpstreamUnavailableError, InvariantViolation):
            raise
        except Exception as exc:
            raise UpstreamUnavailableError(f"price source failed: {exc}") from exc

        if not bars:
            raise UpstreamUnavailableError(f"no bars for {symbol} {timeframe}")
        if len(bars) < count:
            log.info("Price source returned %d of %d requested bars", len(bars), count)

        ohlcv = bars_to_frame(bars)
        require_bars(ohlcv, self.config.analysis.min_bars, "analysis")
        log.info("Loaded %d bars for %s %s (last close %.6g)",
                 len(ohlcv), symbol, timeframe, ohlcv["close"].iloc[-1])
        if len(ohlcv) < self.pipeline.max_lookback:
            log.info("Window shorter than the longest indicator lookback (%d < %d)",
                     len(ohlcv), self.pipeline.max_lookback)
        return ohlcv

    def _technical(self, ohlcv: pd.DataFrame) -> SignalSource:
        result = self.pipeline.evaluate(ohlcv)
        return technical_signal(result, self.config.weights.technical)

    def _guarded(self, name: str, weight: float, fn: Callable, *args) -> SignalSource:
        """Run one source; a source short of history abstains."""
        try:
            return fn(*args)
        except InsufficientDataError as exc:
            log.warning("%s source abstains: %s", name, exc)
            return no_vote(name, weight, str(exc))

    def _calendar(self, now: datetime) -> Optional[CalendarAssessment]:
        if self.calendar_feed is None:
            return None

        cfg = self.config.calendar
        try:
            events = self.calendar_feed.get_upcoming_events(cfg.lookahead)
        except InvariantViolation:
            raise
        except Exception as exc:
            log.warning("Calendar feed failed (%s); blackout=%s", exc, cfg.blackout_on_failure)
            return None

        in_window = [
            e for e in events
            if now - cfg.blackout_after <= e.time <= now + cfg.lookahead
        ]
        return assess_calendar(
            in_window, now, cfg.blackout_before, cfg.blackout_after, self.config.weights.calendar,
        )
