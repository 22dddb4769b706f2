from dataclasses import dataclass

import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading


@dataclass(frozen=True)
class SMA:
    period: int
    src: str = "close"

    @property
    def name(self) -> str:
        return f"sma_{self.period}_{self.src}"

    @property
    def lookback(self) -> int:
        return self.period

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        """
        Computes the Simple Moving Average (SMA).

        Args:
            ohlcv: A DataFrame containing OHLCV data.

        Returns:
            A DataFrame with the computed SMA values.
        """
        # Validate existence of source column
        if self.src not in ohlcv.columns:
            raise ValueError(f"Source column '{self.src}' not found in input DataFrame.")

        feature = ohlcv[self.src].rolling(window=self.period, min_periods=self.period).mean()

        return feature.to_frame(name=self.name)


@dataclass(frozen=True)
class MovingAverageCross:
    """Price vs fast SMA vs slow SMA ordering."""

    fast: int = 20
    slow: int = 50

    @property
    def name(self) -> str:
        return f"ma_cross_{self.fast}_{self.slow}"

    @property
    def lookback(self) -> int:
        return max(self.fast, self.slow)

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        fast = SMA(self.fast).compute(ohlcv)
        slow = SMA(self.slow).compute(ohlcv)
        return pd.concat([fast, slow], axis=1)

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        frame = self.compute(ohlcv)
        price = float(ohlcv["close"].iloc[-1])
        fast = float(frame.iloc[-1, 0])
        slow = float(frame.iloc[-1, 1])

        if price > fast > slow:
            label, strength = Label.BUY, 75.0
            desc = f"Price above SMA{self.fast} above SMA{self.slow}"
        elif price < fast < slow:
            label, strength = Label.SELL, 75.0
            desc = f"Price below SMA{self.fast} below SMA{self.slow}"
        else:
            label, strength = Label.NEUTRAL, 45.0
            desc = f"Price {'above' if price > fast else 'below'} SMA{self.fast}, averages mixed"

        return IndicatorReading(self.name, fast, label, strength, desc)
