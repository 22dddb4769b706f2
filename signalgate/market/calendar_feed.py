"""In-memory CalendarFeed and a YAML loader for economic events."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable, Optional

import pandas as pd
import yaml

from signalgate.labels import Label
from signalgate.market.protocols import EconomicEvent, Impact

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StaticCalendarFeed:
    """Serve a fixed list of events, filtered to ``now ± window``."""

    def __init__(
        self,
        events: Iterable[EconomicEvent],
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._events = sorted(events, key=lambda e: e.time)
        self._clock = clock or _utcnow

    def get_upcoming_events(self, window: timedelta) -> list[EconomicEvent]:
        now = self._clock()
        return [e for e in self._events if now - window <= e.time <= now + window]


def load_events(path: str | Path) -> list[EconomicEvent]:
    """Parse a YAML list of events.

    Each entry needs ``time`` (ISO-8601, UTC assumed when naive), ``impact``
    and ``currency``; ``name``, ``deviation`` and ``market_impact`` are
    optional.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or []

    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of events")

    events = []
    for i, entry in enumerate(raw):
        for key in ("time", "impact", "currency"):
            if key not in entry:
                raise ValueError(f"{path}: event #{i} missing '{key}'")
        ts = pd.Timestamp(entry["time"])
        ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
        events.append(
            EconomicEvent(
                time=ts.to_pydatetime(),
                impact=Impact(str(entry["impact"]).upper()),
                currency=str(entry["currency"]),
                name=str(entry.get("name", "")),
                deviation=float(entry.get("deviation", 0.0)),
                market_impact=Label.parse(entry.get("market_impact", "NEUTRAL")),
            )
        )

    log.info("Loaded %d calendar events from %s", len(events), path)
    return events
