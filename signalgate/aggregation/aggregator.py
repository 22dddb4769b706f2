"""Confidence-weighted vote over heterogeneous signal sources.

Every source label is mapped onto a common 0–100 score (STRONG_BUY 100,
BUY / BULLISH 75, NEUTRAL 50, SELL / BEARISH 25, STRONG_SELL 0). A source
counts with ``weight * confidence / 100``, so a zero-confidence source is
a non-vote. The weighted mean score is mapped back to a trading label.

Overall confidence and the accuracy estimate only look at *active*
sources (confidence > 0 and weight > 0) and reward consensus, the share
of active sources in the largest directional bucket.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from signalgate.errors import InvariantViolation
from signalgate.labels import Label, clamp_confidence, label_from_score
from signalgate.signals.types import SignalSource

log = logging.getLogger(__name__)

MAX_CONFIDENCE = 95.0
CONSENSUS_BONUS = 10.0

ACCURACY_BASE = 60.0
ACCURACY_FLOOR = 45.0
ACCURACY_CEILING = 95.0


@dataclass(frozen=True)
class AggregateResult:
    overall_label: Label
    overall_confidence: float
    accuracy_estimate: float
    component_breakdown: Tuple[SignalSource, ...]
    final_score: float = 50.0
    consensus: float = 0.0

    @property
    def active_sources(self) -> Tuple[SignalSource, ...]:
        return tuple(s for s in self.component_breakdown if s.is_active)


def weighted_score(sources: Sequence[SignalSource]) -> float:
    """``Σ score · ew / Σ ew`` with ``ew = weight · confidence / 100``; 50 when no weight."""
    total = sum(s.effective_weight for s in sources)
    if total == 0:
        return 50.0
    return sum(s.label.score * s.effective_weight for s in sources) / total


def consensus_of(sources: Sequence[SignalSource]) -> float:
    """Share of *sources* in the most populated bias bucket, 0 when empty."""
    if not sources:
        return 0.0
    counts = Counter(s.label.bias for s in sources)
    return max(counts.values()) / len(sources)


def estimate_accuracy(
    data_points: int,
    consensus: float,
    final_score: float,
    calendar_impact: Optional[float] = None,
) -> float:
    """Heuristic hit-rate estimate, bounded to [45, 95].

    More history, stronger agreement and a more decisive score raise it;
    a heavy economic calendar lowers it.
    """
    accuracy = ACCURACY_BASE
    if data_points >= 100:
        accuracy += 20
    elif data_points >= 50:
        accuracy += 10

    accuracy += consensus * 15
    accuracy += abs(final_score - 50) / 50 * 5

    if calendar_impact is not None:
        if calendar_impact > 15:
            accuracy -= 10
        elif calendar_impact < 5:
            accuracy += 5

    return max(ACCURACY_FLOOR, min(ACCURACY_CEILING, accuracy))


def aggregate(
    sources: Sequence[SignalSource],
    data_points: int = 0,
    calendar_impact: Optional[float] = None,
) -> AggregateResult:
    """Combine *sources* into one label, confidence and accuracy estimate.

    The overall label always comes from the five trading labels, so a
    dominant BULLISH or BEARISH source comes back as BUY or SELL. Consensus
    is counted over the active sources only.

    Parameters
    ----------
    sources : sequence of SignalSource
        Order is preserved in ``component_breakdown``.
    data_points : int
        Number of bars behind the analysis; feeds the accuracy estimate.
    calendar_impact : float, optional
        Economic-calendar impact score, ``None`` when no calendar is wired.
    """
    sources = tuple(sources)
    for s in sources:
        if not isinstance(s, SignalSource):
            raise InvariantViolation(f"expected SignalSource, got {type(s).__name__}")

    score = weighted_score(sources)
    if math.isnan(score):
        raise InvariantViolation("aggregate score is NaN")
    label = label_from_score(score)

    active = [s for s in sources if s.is_active]
    consensus = consensus_of(active)
    if active:
        mean_conf = sum(s.confidence for s in active) / len(active)
        confidence = clamp_confidence(min(MAX_CONFIDENCE, mean_conf + consensus * CONSENSUS_BONUS))
    else:
        confidence = 0.0

    accuracy = estimate_accuracy(data_points, consensus, score, calendar_impact)

    log.debug(
        "Aggregate: score=%.2f label=%s confidence=%.1f accuracy=%.1f active=%d/%d",
        score, label.value, confidence, accuracy, len(active), len(sources),
    )

    return AggregateResult(
        overall_label=label,
        overall_confidence=confidence,
        accuracy_estimate=accuracy,
        component_breakdown=sources,
        final_score=score,
        consensus=consensus,
    )
