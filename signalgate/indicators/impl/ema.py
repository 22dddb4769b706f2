from dataclasses import dataclass

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class EMA:
    """Exponential moving average, recursive form (``adjust=False``).

    Warm-up rows before ``period`` observations are NaN. Also the building
    block of :class:`MACD`.
    """

    period: int
    src: str = "close"

    @property
    def name(self) -> str:
        return f"ema_{self.period}_{self.src}"

    @property
    def lookback(self) -> int:
        # one extra bar gives the slope of the last value
        return self.period + 1

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        if self.src not in ohlcv.columns:
            raise ValueError(f"Source column '{self.src}' not found in input DataFrame.")

        feature = ohlcv[self.src].astype(np.float64).ewm(
            span=self.period, min_periods=self.period, adjust=False
        ).mean()

        return feature.to_frame(name=self.name)

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        """BUY above a rising EMA, SELL below a falling one."""
        require_bars(ohlcv, self.lookback, self.name)
        series = self.compute(ohlcv).iloc[:, 0]
        ema, prev = float(series.iloc[-1]), float(series.iloc[-2])
        price = float(ohlcv[self.src].iloc[-1])

        if price > ema and ema > prev:
            return IndicatorReading(self.name, ema, Label.BUY, 60.0, f"Price above rising EMA{self.period}")
        if price < ema and ema < prev:
            return IndicatorReading(self.name, ema, Label.SELL, 60.0, f"Price below falling EMA{self.period}")
        return IndicatorReading(self.name, ema, Label.NEUTRAL, 40.0, f"Price and EMA{self.period} disagree")
