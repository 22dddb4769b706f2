"""Technical source: one vote distilled from the indicator readings."""

from __future__ import annotations

import logging
from typing import Sequence

from signalgate.indicators import IndicatorReading, PipelineResult
from signalgate.labels import Label, clamp_confidence, label_from_score
from .types import SignalSource, no_vote

log = logging.getLogger(__name__)

SOURCE_NAME = "technical"


def combine_readings(readings: Sequence[IndicatorReading]) -> tuple[Label, float, float]:
    """Strength-weighted label score of *readings*.

    Returns ``(label, confidence, score)``. Confidence is the mean strength
    of the readings whose bias agrees with the resulting label; when none
    agree it is half the mean strength of all readings.
    """
    total = sum(r.strength for r in readings)
    if total == 0:
        score = 50.0
    else:
        score = sum(r.label.score * r.strength for r in readings) / total

    label = label_from_score(score)
    agreeing = [r.strength for r in readings if r.label.bias is label.bias]
    if agreeing:
        confidence = sum(agreeing) / len(agreeing)
    else:
        confidence = 0.5 * total / len(readings)

    return label, clamp_confidence(confidence), score


def technical_signal(result: PipelineResult, weight: float = 1.0) -> SignalSource:
    """Reduce an :class:`IndicatorPipeline` result to a single source.

    Indicators skipped for lack of history scale the confidence down by the
    share of indicators that did report.
    """
    readings = result.readings
    if not readings:
        log.warning("No indicator readings; technical source abstains")
        return no_vote(SOURCE_NAME, weight, "no indicator readings")

    label, confidence, score = combine_readings(readings)

    expected = len(readings) + len(result.skipped)
    coverage = len(readings) / expected
    confidence = clamp_confidence(confidence * coverage)

    return SignalSource(
        source_name=SOURCE_NAME,
        label=label,
        confidence=confidence,
        weight=weight,
        metadata={
            "score": score,
            "coverage": coverage,
            "skipped": list(result.skipped),
            "indicators": {
                r.name: {
                    "value": r.value,
                    "label": r.label.value,
                    "strength": r.strength,
                    "description": r.description,
                }
                for r in readings
            },
        },
    )
