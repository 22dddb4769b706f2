"""PriceBar value object and fail-fast checks for bar DataFrames."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

import pandas as pd

from signalgate.errors import InsufficientDataError

OHLCV_COLUMNS: list[str] = ["time", "open", "high", "low", "close", "volume"]


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV candle, immutable once produced by the data source."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


def bars_to_frame(bars: Sequence[PriceBar]) -> pd.DataFrame:
    """Convert an oldest→newest bar sequence into a validated DataFrame.

    The frame has a ``RangeIndex`` and the columns in ``OHLCV_COLUMNS``;
    ``time`` is ``datetime64[ns, UTC]``.
    """
    df = pd.DataFrame(
        [
            {
                "time": b.timestamp,
                "open": float(b.open),
                "high": float(b.high),
                "low": float(b.low),
                "close": float(b.close),
                "volume": float(b.volume),
            }
            for b in bars
        ],
        columns=OHLCV_COLUMNS,
    )
    df["time"] = pd.to_datetime(df["time"], utc=True)
    validate_bars(df)
    return df


def frame_to_bars(df: pd.DataFrame) -> list[PriceBar]:
    """Inverse of :func:`bars_to_frame`."""
    return [
        PriceBar(
            timestamp=row.time.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


def validate_bars(df: pd.DataFrame) -> None:
    """Validate a bar DataFrame *before* any analysis.

    Raises ``ValueError`` immediately on the first problem found so that
    corrupt / malformed data never silently reaches the indicators.
    """

    # 1. Timestamp column exists with no nulls ──────────────────────────
    if "time" not in df.columns:
        raise ValueError("Missing 'time' column")
    if df["time"].isna().any():
        n = int(df["time"].isna().sum())
        raise ValueError(f"Null timestamps found: {n} rows")

    # 2. Strictly increasing time ───────────────────────────────────────
    times = pd.to_datetime(df["time"], utc=True)

    n_dupes = int(times.duplicated().sum())
    if n_dupes > 0:
        raise ValueError(f"Duplicate timestamps found: {n_dupes}")

    if not times.is_monotonic_increasing:
        raise ValueError("Timestamps not monotonic increasing")

    # 3. No NaNs in OHLC fields ────────────────────────────────────────
    ohlc = ["open", "high", "low", "close"]
    missing = [c for c in ohlc if c not in df.columns]
    if missing:
        raise ValueError(f"Missing OHLC columns: {missing}")
    na_cols = [c for c in ohlc if df[c].isna().any()]
    if na_cols:
        raise ValueError(f"NaN values in {na_cols}")

    # 4. Strictly positive prices ──────────────────────────────────────
    bad_cols = [c for c in ohlc if (df[c] <= 0).any()]
    if bad_cols:
        raise ValueError(f"Non-positive prices in {bad_cols}")

    # 5. Volume sanity ─────────────────────────────────────────────────
    if "volume" in df.columns:
        n_na = int(df["volume"].isna().sum())
        if n_na > 0:
            raise ValueError(f"NaN volume found: {n_na} rows")
        neg = int((df["volume"] < 0).sum())
        if neg > 0:
            raise ValueError(f"Negative volume found: {neg} rows")


def require_bars(ohlcv: pd.DataFrame, required: int, name: str) -> None:
    """Raise :class:`InsufficientDataError` when *ohlcv* is shorter than *required*."""
    if len(ohlcv) < required:
        raise InsufficientDataError(name, required, len(ohlcv))
