from dataclasses import dataclass

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class BollingerPosition:
    """Where the close sits relative to SMA(period) ± k * stddev(period)."""

    period: int = 20
    k: float = 2.0
    src: str = "close"

    @property
    def name(self) -> str:
        return f"bollinger_{self.period}_{self.k:g}"

    @property
    def lookback(self) -> int:
        return self.period

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        if self.src not in ohlcv.columns:
            raise ValueError(f"Source column '{self.src}' not found in input DataFrame.")

        price = ohlcv[self.src].astype(np.float64)
        roll = price.rolling(window=self.period, min_periods=self.period)
        middle = roll.mean()
        std = roll.std(ddof=0)
        upper = middle + self.k * std
        lower = middle - self.k * std

        width = (upper - lower).replace(0.0, np.nan)
        pct_b = ((price - lower) / width).where(width.notna(), 0.5)
        pct_b = pct_b.where(middle.notna())

        return pd.DataFrame(
            {
                f"{self.name}_middle": middle,
                f"{self.name}_upper": upper,
                f"{self.name}_lower": lower,
                f"{self.name}_pct_b": pct_b,
            },
            index=ohlcv.index,
        )

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        last = self.compute(ohlcv).iloc[-1]
        upper = float(last.iloc[1])
        lower = float(last.iloc[2])
        pct_b = float(last.iloc[3])
        price = float(ohlcv[self.src].iloc[-1])

        if upper > lower and price <= lower:
            return IndicatorReading(self.name, pct_b, Label.BUY, 80.0, "Price at/below lower band")
        if upper > lower and price >= upper:
            return IndicatorReading(self.name, pct_b, Label.SELL, 80.0, "Price at/above upper band")
        return IndicatorReading(self.name, pct_b, Label.NEUTRAL, 50.0, "Price inside bands")
