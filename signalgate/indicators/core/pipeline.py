import logging
from dataclasses import dataclass, field
from typing import List, Tuple

import pandas as pd

from signalgate.errors import InsufficientDataError
from signalgate.market.bars import require_bars
from .interfaces import IndicatorReading, LabelledIndicator, validate_ohlcv

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    readings: Tuple[IndicatorReading, ...]
    skipped: Tuple[str, ...] = ()

    @property
    def by_name(self) -> dict:
        return {r.name: r for r in self.readings}


@dataclass(frozen=True)
class IndicatorPipeline:
    indicators: List[LabelledIndicator]
    min_bars: int = 20

    def evaluate(self, ohlcv: pd.DataFrame) -> PipelineResult:
        """
        Labels the latest bar with every indicator that has enough history.

        Args:
            ohlcv: Input DataFrame with OHLCV data, oldest row first.

        Returns:
            PipelineResult with one reading per indicator; indicators whose
            lookback exceeds the window are listed in ``skipped``.

        Raises:
            InsufficientDataError: If the whole window is shorter than ``min_bars``.
        """
        validate_ohlcv(ohlcv)
        require_bars(ohlcv, self.min_bars, "indicator pipeline")

        readings = []
        skipped = []
        for ind in self.indicators:
            try:
                readings.append(ind.evaluate(ohlcv))
            except InsufficientDataError as exc:
                log.warning("Skipping %s: %s", ind.name, exc)
                skipped.append(ind.name)

        return PipelineResult(readings=tuple(readings), skipped=tuple(skipped))

    def transform(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        """
        Computes the full series of every indicator.

        Args:
            ohlcv: Input DataFrame with OHLCV data.

        Returns:
            DataFrame with all computed columns, sorted alphabetically by column name.
        """
        validate_ohlcv(ohlcv)

        features = [ind.compute(ohlcv) for ind in self.indicators]
        if not features:
            return pd.DataFrame(index=ohlcv.index)

        X = pd.concat(features, axis=1)
        X = X.reindex(sorted(X.columns), axis=1)
        return X

    @property
    def max_lookback(self) -> int:
        return max((ind.lookback for ind in self.indicators), default=0)
