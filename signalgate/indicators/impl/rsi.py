from dataclasses import dataclass

import numpy as np
import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class RSI:
    """Relative Strength Index over simple average gains / losses.

    ``rsi = 100 - 100 / (1 + avg_gain / avg_loss)``; 100 when there are no
    losses in the window, 50 when the window is completely flat.
    """

    period: int = 14
    src: str = "close"

    @property
    def name(self) -> str:
        return f"rsi_{self.period}"

    @property
    def lookback(self) -> int:
        # `period` deltas need `period + 1` prices
        return self.period + 1

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        if self.src not in ohlcv.columns:
            raise ValueError(f"Source column '{self.src}' not found in input DataFrame.")

        delta = ohlcv[self.src].astype(np.float64).diff()
        gain = delta.clip(lower=0.0)
        loss = (-delta).clip(lower=0.0)

        avg_gain = gain.rolling(window=self.period, min_periods=self.period).mean()
        avg_loss = loss.rolling(window=self.period, min_periods=self.period).mean()

        rs = avg_gain / avg_loss.replace(0.0, np.nan)
        rsi = 100.0 - 100.0 / (1.0 + rs)
        rsi = rsi.mask(avg_loss == 0, 100.0)
        rsi = rsi.mask((avg_loss == 0) & (avg_gain == 0), 50.0)

        return rsi.to_frame(name=self.name)

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        value = float(self.compute(ohlcv).iloc[-1, 0])
        label, strength, desc = _label_rsi(value)
        return IndicatorReading(self.name, value, label, strength, f"RSI at {value:.1f} - {desc}")


def _label_rsi(value: float) -> tuple[Label, float, str]:
    if value < 25:
        return Label.STRONG_BUY, 85.0, "deeply oversold"
    if value < 30:
        return Label.BUY, 85.0, "oversold"
    if value > 75:
        return Label.STRONG_SELL, 85.0, "deeply overbought"
    if value > 70:
        return Label.SELL, 85.0, "overbought"
    if value >= 50:
        # weak bullish band
        return Label.BUY, 65.0 if value > 60 else 40.0, "bullish momentum"
    return Label.NEUTRAL, 65.0 if value < 40 else 40.0, "neutral"
