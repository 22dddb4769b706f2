"""Market data: bar records, validation and collaborator protocols."""

from .bars import OHLCV_COLUMNS, PriceBar, bars_to_frame, frame_to_bars, require_bars, validate_bars
from .protocols import (
    CalendarFeed,
    EconomicEvent,
    ExternalSentiment,
    Impact,
    PriceSource,
    SentimentContext,
    SentimentProvider,
)
from .csv_source import CsvPriceSource
from .calendar_feed import StaticCalendarFeed, load_events

__all__ = [
    "OHLCV_COLUMNS",
    "PriceBar",
    "bars_to_frame",
    "frame_to_bars",
    "require_bars",
    "validate_bars",
    "CalendarFeed",
    "EconomicEvent",
    "ExternalSentiment",
    "Impact",
    "PriceSource",
    "SentimentContext",
    "SentimentProvider",
    "CsvPriceSource",
    "StaticCalendarFeed",
    "load_events",
]
