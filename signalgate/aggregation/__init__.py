from signalgate.aggregation.aggregator import (
    AggregateResult,
    aggregate,
    consensus_of,
    estimate_accuracy,
    weighted_score,
)

__all__ = ["AggregateResult", "aggregate", "consensus_of", "estimate_accuracy", "weighted_score"]
