from dataclasses import dataclass

import pandas as pd

from signalgate.labels import Label
from signalgate.market.bars import require_bars
from ..core.interfaces import IndicatorReading
from .ema import EMA


@dataclass(frozen=True)
class MACD:
    """EMA(fast) - EMA(slow), with an EMA(signal) signal line over the MACD series."""

    fast: int = 12
    slow: int = 26
    signal: int = 9
    src: str = "close"

    @property
    def name(self) -> str:
        return f"macd_{self.fast}_{self.slow}_{self.signal}"

    @property
    def lookback(self) -> int:
        # first signal value needs `signal` MACD values, the first of which needs `slow` bars
        return self.slow + self.signal - 1

    def compute(self, ohlcv: pd.DataFrame) -> pd.DataFrame:
        fast = EMA(self.fast, self.src).compute(ohlcv).iloc[:, 0]
        slow = EMA(self.slow, self.src).compute(ohlcv).iloc[:, 0]

        macd = fast - slow
        signal = macd.ewm(span=self.signal, min_periods=self.signal, adjust=False).mean()

        return pd.DataFrame(
            {
                f"{self.name}_line": macd,
                f"{self.name}_signal": signal,
                f"{self.name}_hist": macd - signal,
            },
            index=ohlcv.index,
        )

    def evaluate(self, ohlcv: pd.DataFrame) -> IndicatorReading:
        require_bars(ohlcv, self.lookback, self.name)
        last = self.compute(ohlcv).iloc[-1]
        macd = float(last.iloc[0])
        hist = float(last.iloc[2])
        price = float(ohlcv[self.src].iloc[-1])

        # histogram in basis points of price
        hist_bps = abs(hist) / price * 10_000 if price else 0.0
        strength = min(100.0, 50.0 + hist_bps * 5.0)

        if hist > 0:
            return IndicatorReading(self.name, macd, Label.BUY, strength, "MACD above signal line")
        if hist < 0:
            return IndicatorReading(self.name, macd, Label.SELL, strength, "MACD below signal line")
        return IndicatorReading(self.name, macd, Label.NEUTRAL, 40.0, "MACD on signal line")
