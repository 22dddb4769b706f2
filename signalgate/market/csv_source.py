"""Concrete PriceSource backed by CSV bar snapshots on disk."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from signalgate.errors import UpstreamUnavailableError
from signalgate.market.bars import PriceBar, frame_to_bars, validate_bars

log = logging.getLogger(__name__)


class CsvPriceSource:
    """Serve the most recent bars from ``<symbol>_<timeframe>*.csv`` files.

    Files are concatenated in name order (e.g. one file per year) and must
    together form a strictly increasing ``time`` column.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    def get_recent_bars(self, symbol: str, timeframe: str, count: int) -> list[PriceBar]:
        csv_files = sorted(self._data_dir.glob(f"{symbol}_{timeframe}*.csv"))
        if not csv_files:
            raise UpstreamUnavailableError(
                f"No CSV files for {symbol} {timeframe} in {self._data_dir}"
            )

        frames = []
        for csv_file in csv_files:
            df_part = pd.read_csv(csv_file)
            frames.append(df_part)
            log.info("  Loaded %s  (%s rows)", csv_file.name, f"{len(df_part):,}")

        df = pd.concat(frames, ignore_index=True)

        # ── Handle missing volume column ─────────────────────────────────
        if "volume" not in df.columns:
            if "tick_volume" in df.columns:
                log.info("Aliasing 'tick_volume' to 'volume'")
                df["volume"] = df["tick_volume"]
            elif "real_volume" in df.columns:
                log.info("Aliasing 'real_volume' to 'volume'")
                df["volume"] = df["real_volume"]
            else:
                raise UpstreamUnavailableError(
                    f"No volume column in snapshot for {symbol} {timeframe}"
                )

        df["time"] = pd.to_datetime(df["time"], utc=True)
        validate_bars(df)

        recent = df.tail(count).reset_index(drop=True)
        if len(recent) < count:
            log.info("Requested %d bars, snapshot holds %d", count, len(recent))
        return frame_to_bars(recent)
