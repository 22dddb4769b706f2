"""YAML config loading and validation."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pandas as pd
import pytest

from signalgate.config import AnalysisConfig, EngineConfig, WeightsConfig, config_from_dict, load_config
from signalgate.decision import Direction
from signalgate.engine import AnalysisEngine
from signalgate.market import PriceBar

DEFAULT_YAML = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


class _FixedBars:
    def __init__(self, bars):
        self.bars = bars

    def get_recent_bars(self, symbol, timeframe, count):
        return self.bars[-count:]


def test_shipped_defaults_match_code_defaults():
    assert load_config(DEFAULT_YAML) == EngineConfig()


def test_empty_file_is_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == EngineConfig()


def test_partial_override(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "weights:\n"
        "  sentiment: 0.0\n"
        "decision:\n"
        "  confidence_floor: 70\n"
        "calendar:\n"
        "  blackout_before_minutes: 45\n"
    )
    cfg = load_config(path)
    assert cfg.weights.sentiment == 0.0
    assert cfg.weights.technical == 0.30
    assert cfg.decision.confidence_floor == 70
    assert cfg.calendar.blackout_before == timedelta(minutes=45)
    assert cfg.risk.max_position_fraction == 0.25


def test_unknown_key():
    with pytest.raises(ValueError, match=r"Unknown key\(s\) in 'weights': sentimnet"):
        config_from_dict({"weights": {"sentimnet": 0.2}})


def test_unknown_section():
    with pytest.raises(ValueError, match=r"Unknown config section\(s\): wieghts"):
        config_from_dict({"wieghts": {}})


def test_section_must_be_mapping():
    with pytest.raises(ValueError, match="must be a mapping"):
        config_from_dict({"risk": [1, 2]})


@pytest.mark.parametrize("value", [-0.1, 1.5])
def test_weight_bounds(value):
    with pytest.raises(ValueError, match="weights.technical"):
        WeightsConfig(technical=value)


def test_bar_count_below_min_bars():
    with pytest.raises(ValueError, match="bar_count"):
        config_from_dict({"analysis": {"bar_count": 10, "min_bars": 20}})


@pytest.mark.parametrize("min_bars", [0, 1, 2])
def test_min_bars_covers_risk_gate(min_bars):
    with pytest.raises(ValueError, match="analysis.min_bars must be >= 3"):
        AnalysisConfig(bar_count=10, min_bars=min_bars)


def test_smallest_window_runs_end_to_end():
    config = EngineConfig(analysis=AnalysisConfig(bar_count=3, min_bars=3))
    times = pd.date_range("2024-01-01", periods=3, freq="h", tz="UTC")
    bars = [
        PriceBar(t.to_pydatetime(), c, c + 0.5, c - 0.5, c, 1000.0)
        for t, c in zip(times, [100.0, 101.0, 102.0])
    ]
    source = _FixedBars(bars)
    decision = AnalysisEngine(source, config=config).run_analysis("EURUSD", "H1")
    assert decision.direction in set(Direction)


def test_nested_validation_surfaces():
    with pytest.raises(ValueError, match="max_position_fraction"):
        config_from_dict({"risk": {"max_position_fraction": 2.0}})
    with pytest.raises(ValueError, match="timeout_seconds"):
        config_from_dict({"sentiment": {"timeout_seconds": 0}})
