"""Economic-calendar source: event impact, blackout windows, risk periods."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence, Tuple

from signalgate.labels import Bias, Label, clamp_confidence
from signalgate.market.protocols import EconomicEvent, Impact
from .types import SignalSource, no_vote

SOURCE_NAME = "calendar"

IMPACT_WEIGHTS = {Impact.HIGH: 3.0, Impact.MEDIUM: 2.0, Impact.LOW: 1.0}

RISK_BEFORE = timedelta(minutes=30)
RISK_AFTER = timedelta(minutes=60)

# net directional share needed before the calendar leans one way
LEAN_THRESHOLD = 0.25


@dataclass(frozen=True)
class CalendarAssessment:
    source: SignalSource
    impact_score: float
    blackout: bool
    risk_periods: Tuple[Tuple[datetime, datetime], ...] = ()
    event_count: int = 0


def event_weight(event: EconomicEvent) -> float:
    return IMPACT_WEIGHTS[event.impact] * (1 + abs(event.deviation) / 100)


def impact_score(events: Sequence[EconomicEvent]) -> float:
    """``Σ w(impact) · (1 + |deviation| / 100)`` with HIGH=3, MEDIUM=2, LOW=1."""
    return sum(event_weight(e) for e in events)


def is_blackout(
    events: Sequence[EconomicEvent],
    now: datetime,
    before: timedelta,
    after: timedelta,
) -> bool:
    """True when a HIGH-impact event lies in ``[now - after, now + before]``.

    *before* is how long ahead of an event trading stops, *after* how long
    it stays stopped once the event has passed.
    """
    return any(
        e.impact is Impact.HIGH and now - after <= e.time <= now + before
        for e in events
    )


def risk_periods(events: Sequence[EconomicEvent]) -> Tuple[Tuple[datetime, datetime], ...]:
    """Half an hour before to one hour after every HIGH-impact event."""
    return tuple(
        (e.time - RISK_BEFORE, e.time + RISK_AFTER)
        for e in sorted(events, key=lambda e: e.time)
        if e.impact is Impact.HIGH
    )


def calendar_lean(events: Sequence[EconomicEvent]) -> Label:
    """Impact-weighted net of the events' expected market impact."""
    total = impact_score(events)
    if total == 0:
        return Label.NEUTRAL

    net = 0.0
    for e in events:
        if e.market_impact.bias is Bias.BULLISH:
            net += event_weight(e)
        elif e.market_impact.bias is Bias.BEARISH:
            net -= event_weight(e)

    share = net / total
    if share > LEAN_THRESHOLD:
        return Label.BULLISH
    if share < -LEAN_THRESHOLD:
        return Label.BEARISH
    return Label.NEUTRAL


def recommendation(score: float, high_impact: int) -> str:
    if score > 20:
        return "High volatility expected. Consider reducing exposure or waiting for post-event clarity."
    if score > 15 and high_impact > 2:
        return "Multiple major events. Consider staying out of the market or using very tight stops."
    if score > 10:
        return "Moderate volatility expected. Monitor events closely and adjust stops accordingly."
    return "Standard trading approach."


def assess_calendar(
    events: Sequence[EconomicEvent],
    now: datetime,
    before: timedelta = timedelta(minutes=30),
    after: timedelta = timedelta(minutes=30),
    weight: float = 1.0,
) -> CalendarAssessment:
    """Score the events in the look-ahead window and decide on a blackout.

    A blackout forces the source to NEUTRAL, the decision layer then blocks
    trading unless the aggregate is overwhelming.
    """
    score = impact_score(events)
    blackout = is_blackout(events, now, before, after)
    periods = risk_periods(events)

    if not events:
        source = no_vote(SOURCE_NAME, weight, "no events in window")
    else:
        label = Label.NEUTRAL if blackout else calendar_lean(events)
        high = sum(1 for e in events if e.impact is Impact.HIGH)
        source = SignalSource(
            source_name=SOURCE_NAME,
            label=label,
            confidence=clamp_confidence(min(100.0, score * 4)),
            weight=weight,
            metadata={
                "impact_score": score,
                "blackout": blackout,
                "high_impact_events": high,
                "risk_periods": [(s.isoformat(), e.isoformat()) for s, e in periods],
                "recommendation": recommendation(score, high),
            },
        )

    return CalendarAssessment(
        source=source,
        impact_score=score,
        blackout=blackout,
        risk_periods=periods,
        event_count=len(events),
    )
