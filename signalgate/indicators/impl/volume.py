from dataclasses import dataclass

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class VolumeRatio:
    """Current volume / SMA(volume, period). 1.0 when average volume is zero."""

    period: int = 20
    high: float = 1.5
    low: float = 0.7

    @property
    def name(self) -> str:
        return f"volume_ratio_{self.period}"

    @property
    def lookback(self) -> int:
        return self.period

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        if "volume" not in ohlcv.columns:
            raise ValueError("Source column 'volume' not found in input DataFrame.")

        volume = ohlcv["volume"].astype(np.float64)
        avg = volume.rolling(window=self.period, min_periods=self.period).mean()
        ratio = (volume / avg.replace(0.0, np.nan)).where(avg != 0, 1.0)
        ratio = ratio.where(avg.notna())

        return ratio.to_frame(name=self.name)

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        ratio = float(self.compute(ohlcv).iloc[-1, 0])
        strength = min(100.0, abs(ratio - 1.0) * 100.0)

        if ratio > self.high:
            label = Label.BUY
        elif ratio < self.low:
            label = Label.SELL
        else:
            label = Label.NEUTRAL

        where = "above" if ratio > 1.2 else "below" if ratio < 0.8 else "near"
        return IndicatorReading(self.name, ratio, label, strength, f"Volume {where} average ({ratio:.2f}x)")
