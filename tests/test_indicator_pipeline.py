import numpy as np
import pandas as pd
import pytest

from signalgate.errors import InsufficientDataError
from signalgate.indicators import (
    RSI,
    SMA,
    IndicatorPipeline,
    MovingAverageCross,
    VolumeRatio,
    default_indicators,
)


@pytest.fixture
def sample_ohlcv():
    rng = np.random.default_rng(7)
    n = 100
    close = np.linspace(100, 110, n) + rng.normal(0, 0.5, n)
    return pd.DataFrame({
        "open": close + rng.normal(0, 0.2, n),
        "high": close + 1,
        "low": close - 1,
        "close": close,
        "volume": rng.integers(100, 1000, n).astype(float),
    })


def test_sma_basic(sample_ohlcv):
    period = 10
    output = SMA(period).compute(sample_ohlcv)

    assert isinstance(output, pd.DataFrame)
    assert len(output) == len(sample_ohlcv)
    assert list(output.columns) == [f"sma_{period}_close"]
    assert pd.isna(output.iloc[period - 2, 0])
    assert output.iloc[period - 1, 0] == pytest.approx(sample_ohlcv["close"].iloc[:period].mean())


def test_evaluate_one_reading_per_indicator(sample_ohlcv):
    pipeline = IndicatorPipeline(default_indicators())
    result = pipeline.evaluate(sample_ohlcv)

    assert len(result.readings) == len(default_indicators())
    assert result.skipped == ()
    assert set(result.by_name) == {ind.name for ind in default_indicators()}


def test_short_indicator_history_is_skipped(sample_ohlcv):
    pipeline = IndicatorPipeline([RSI(14), MovingAverageCross(20, 50)], min_bars=20)
    result = pipeline.evaluate(sample_ohlcv.iloc[:30])

    assert [r.name for r in result.readings] == ["rsi_14"]
    assert result.skipped == ("ma_cross_20_50",)


def test_window_below_min_bars_fails_fast(sample_ohlcv):
    pipeline = IndicatorPipeline([RSI(14)], min_bars=20)
    with pytest.raises(InsufficientDataError, match="needs at least 20 bars, got 19"):
        pipeline.evaluate(sample_ohlcv.iloc[:19])


def test_missing_columns(sample_ohlcv):
    pipeline = IndicatorPipeline([RSI(14)])
    with pytest.raises(ValueError, match="missing required columns"):
        pipeline.evaluate(sample_ohlcv.drop(columns=["volume"]))


def test_transform_columns_sorted(sample_ohlcv):
    pipeline = IndicatorPipeline([VolumeRatio(20), SMA(10), RSI(14)])
    X = pipeline.transform(sample_ohlcv)

    assert list(X.columns) == sorted(["volume_ratio_20", "sma_10_close", "rsi_14"])
    assert len(X) == len(sample_ohlcv)


def test_pipeline_determinism(sample_ohlcv):
    pipeline = IndicatorPipeline(default_indicators())
    assert pipeline.evaluate(sample_ohlcv) == pipeline.evaluate(sample_ohlcv)
    pd.testing.assert_frame_equal(pipeline.transform(sample_ohlcv), pipeline.transform(sample_ohlcv))


def test_max_lookback():
    pipeline = IndicatorPipeline([RSI(14), MovingAverageCross(20, 50), VolumeRatio(20)])
    assert pipeline.max_lookback == 50
    assert IndicatorPipeline([]).max_lookback == 0
