"""Protocol definitions for the collaborators the engine consumes."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol, runtime_checkable

from signalgate.errors import InvariantViolation
from signalgate.market.bars import PriceBar
from signalgate.labels import SENTIMENT_LABELS, Label


class Impact(str, enum.Enum):
    """Economic-event impact class."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class EconomicEvent:
    """One calendar entry as delivered by a :class:`CalendarFeed`.

    ``time`` must be timezone-aware. ``deviation`` is the actual-vs-forecast
    surprise in percent, ``market_impact`` the expected directional effect
    on the analysed symbol.
    """

    time: datetime
    impact: Impact
    currency: str
    name: str = ""
    deviation: float = 0.0
    market_impact: Label = Label.NEUTRAL

    def __post_init__(self) -> None:
        if self.time.tzinfo is None:
            raise InvariantViolation(f"event time must be timezone-aware: {self.name!r}")
        if self.market_impact not in SENTIMENT_LABELS:
            raise InvariantViolation(
                f"event market_impact must be a sentiment label, got {self.market_impact}"
            )


@dataclass(frozen=True)
class SentimentContext:
    """Price-action summary handed to an external sentiment provider."""

    symbol: str
    timeframe: str
    last_close: float
    change_pct: float
    trend: Label
    momentum: str
    volatility: float
    volume_ratio: float


@dataclass(frozen=True)
class ExternalSentiment:
    """Opinion returned by a :class:`SentimentProvider`."""

    label: Label
    confidence: float
    source: str = "external"

    def __post_init__(self) -> None:
        if self.label not in SENTIMENT_LABELS:
            raise InvariantViolation(
                f"external sentiment must be BULLISH/BEARISH/NEUTRAL, got {self.label}"
            )
        if not 0.0 <= self.confidence <= 100.0:
            raise InvariantViolation(
                f"external sentiment confidence {self.confidence} outside [0, 100]"
            )


@runtime_checkable
class PriceSource(Protocol):
    """Any bar-data provider (exchange REST client, CSV snapshot, mock).

    Returns bars ordered oldest→newest. May return fewer bars than
    requested; may raise on network failure.
    """

    def get_recent_bars(
        self, symbol: str, timeframe: str, count: int,
    ) -> list[PriceBar]: ...


@runtime_checkable
class SentimentProvider(Protocol):
    """Optional text/AI opinion. ``None`` means no opinion is available."""

    def get_external_sentiment(
        self, context: SentimentContext,
    ) -> Optional[ExternalSentiment]: ...


@runtime_checkable
class CalendarFeed(Protocol):
    """Economic calendar covering at least ``window`` around now."""

    def get_upcoming_events(self, window: timedelta) -> list[EconomicEvent]: ...
