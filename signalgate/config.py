"""YAML configuration → frozen dataclasses.

Every key is optional; an unknown key is an error so that typos do not
silently fall back to defaults.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from signalgate.decision.decide import DecisionConfig
from signalgate.risk.gate import MIN_BARS as RISK_MIN_BARS
from signalgate.risk.gate import RiskGateConfig


@dataclass(frozen=True)
class AnalysisConfig:
    bar_count: int = 100
    min_bars: int = 20
    max_workers: int = 4

    def __post_init__(self) -> None:
        # the risk gate is the one stage that cannot abstain on a short window
        if self.min_bars < RISK_MIN_BARS:
            raise ValueError(
                f"analysis.min_bars must be >= {RISK_MIN_BARS}, got {self.min_bars}"
            )
        if self.bar_count < self.min_bars:
            raise ValueError(
                f"analysis.bar_count ({self.bar_count}) must be >= analysis.min_bars ({self.min_bars})"
            )
        if self.max_workers < 1:
            raise ValueError(f"analysis.max_workers must be >= 1, got {self.max_workers}")


@dataclass(frozen=True)
class WeightsConfig:
    """Declared per-source weights in [0, 1]; they need not sum to 1."""

    technical: float = 0.30
    sentiment: float = 0.25
    structure: float = 0.20
    patterns: float = 0.15
    backtest: float = 0.10
    risk: float = 0.10
    calendar: float = 0.10

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"weights.{f.name} must be in [0, 1], got {value}")


@dataclass(frozen=True)
class SentimentConfig:
    timeout_seconds: float = 5.0
    ai_confidence_boost: float = 5.0

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"sentiment.timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.ai_confidence_boost < 0:
            raise ValueError(
                f"sentiment.ai_confidence_boost must be >= 0, got {self.ai_confidence_boost}"
            )


@dataclass(frozen=True)
class CalendarConfig:
    lookahead_hours: float = 24.0
    blackout_before_minutes: float = 30.0
    blackout_after_minutes: float = 30.0
    blackout_on_failure: bool = False

    @property
    def lookahead(self) -> timedelta:
        return timedelta(hours=self.lookahead_hours)

    @property
    def blackout_before(self) -> timedelta:
        return timedelta(minutes=self.blackout_before_minutes)

    @property
    def blackout_after(self) -> timedelta:
        return timedelta(minutes=self.blackout_after_minutes)


@dataclass(frozen=True)
class EngineConfig:
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    weights: WeightsConfig = field(default_factory=WeightsConfig)
    sentiment: SentimentConfig = field(default_factory=SentimentConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    risk: RiskGateConfig = field(default_factory=RiskGateConfig)
    decision: DecisionConfig = field(default_factory=DecisionConfig)


def _build(cls, section: str, raw: Optional[Mapping[str, Any]]):
    if raw is None:
        return cls()
    if not isinstance(raw, Mapping):
        raise ValueError(f"Config section '{section}' must be a mapping, got {type(raw).__name__}")

    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown key(s) in '{section}': {', '.join(unknown)}")
    return cls(**raw)


def config_from_dict(raw: Optional[Mapping[str, Any]]) -> EngineConfig:
    raw = raw or {}
    sections = {f.name: f for f in dataclasses.fields(EngineConfig)}

    unknown = sorted(set(raw) - set(sections))
    if unknown:
        raise ValueError(f"Unknown config section(s): {', '.join(unknown)}")

    return EngineConfig(**{
        name: _build(f.default_factory, name, raw.get(name))
        for name, f in sections.items()
    })


def load_config(path: Union[str, Path]) -> EngineConfig:
    """Read a YAML config file. An empty file yields the defaults."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return config_from_dict(raw)
