"""SignalSource: output of every signal source, input of the aggregator."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from signalgate.errors import InvariantViolation
from signalgate.labels import Label


@dataclass(frozen=True)
class SignalSource:
    """One independent opinion: a label, how sure it is, and how much it counts.

    Attributes
    ----------
    source_name : str
        Stable identifier, e.g. ``"technical"``.
    label : Label
        Trading or sentiment label.
    confidence : float
        0–100.  Zero means "no vote".
    weight : float
        0–1 declared weight; the aggregator normalizes across sources.
    metadata : Mapping
        Source-specific detail for reporting.  Never read by the aggregator.
    """

    source_name: str
    label: Label
    confidence: float
    weight: float = 1.0
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.label, Label):
            raise InvariantViolation(
                f"{self.source_name}: label must be a Label, got {self.label!r}"
            )
        if math.isnan(self.confidence) or not 0.0 <= self.confidence <= 100.0:
            raise InvariantViolation(
                f"{self.source_name}: confidence {self.confidence} outside [0, 100]"
            )
        if math.isnan(self.weight) or not 0.0 <= self.weight <= 1.0:
            raise InvariantViolation(
                f"{self.source_name}: weight {self.weight} outside [0, 1]"
            )

    @property
    def is_active(self) -> bool:
        """Sources with zero confidence or zero weight are non-votes."""
        return self.confidence > 0.0 and self.weight > 0.0

    @property
    def effective_weight(self) -> float:
        return self.weight * (self.confidence / 100.0)


def no_vote(source_name: str, weight: float, reason: str) -> SignalSource:
    """Zero-confidence NEUTRAL used when a source's upstream data is absent."""
    return SignalSource(
        source_name=source_name,
        label=Label.NEUTRAL,
        confidence=0.0,
        weight=weight,
        metadata={"reason": reason},
    )
