from .core.interfaces import Indicator, IndicatorReading, LabelledIndicator, validate_ohlcv
from .core.pipeline import IndicatorPipeline, PipelineResult
from .impl.ma import SMA, MovingAverageCross
from .impl.ema import EMA
from .impl.rsi import RSI
from .impl.macd import MACD
from .impl.bollinger import BollingerPosition
from .impl.volume import VolumeRatio
from .impl.volatility import Volatility
from .impl.atr import ATR

__all__ = [
    "Indicator",
    "IndicatorReading",
    "LabelledIndicator",
    "validate_ohlcv",
    "IndicatorPipeline",
    "PipelineResult",
    "SMA",
    "EMA",
    "MovingAverageCross",
    "RSI",
    "MACD",
    "BollingerPosition",
    "VolumeRatio",
    "Volatility",
    "ATR",
    "default_indicators",
]


def default_indicators() -> list:
    """RSI(14), MACD(12/26/9), SMA 20/50 cross, Bollinger(20, 2), volume ratio, volatility."""
    return [
        RSI(14),
        MACD(12, 26, 9),
        MovingAverageCross(20, 50),
        BollingerPosition(20, 2.0),
        VolumeRatio(20),
        Volatility(20),
    ]
