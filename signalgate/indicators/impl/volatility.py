from dataclasses import dataclass

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class Volatility:
    """Rolling stdev of bar-over-bar percentage returns (fraction, not %).

    Direction neutral: always labelled NEUTRAL, with a strength that grows
    with volatility so turbulent windows pull the technical vote toward
    neutral.
    """

    window: int = 20
    src: str = "close"

    @property
    def name(self) -> str:
        return f"volatility_{self.window}"

    @property
    def lookback(self) -> int:
        return self.window + 1

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        if self.src not in ohlcv.columns:
            raise ValueError(f"Source column '{self.src}' not found in input DataFrame.")

        returns = ohlcv[self.src].astype(np.float64).pct_change()
        vol = returns.rolling(window=self.window, min_periods=self.window).std()

        return vol.to_frame(name=self.name)

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        vol = float(self.compute(ohlcv).iloc[-1, 0])
        # 5% per-bar stdev saturates
        strength = min(100.0, vol * 2000.0)
        return IndicatorReading(
            self.name, vol, Label.NEUTRAL, strength, f"Return stdev {vol * 100:.2f}% per bar"
        )
