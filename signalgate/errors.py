"""Error taxonomy for the analysis engine."""


class SignalGateError(Exception):
    """Base error for signalgate."""
    pass


class InsufficientDataError(SignalGateError):
    """Too few bars for a required calculation.

    Fatal to the indicator (or stage) that raised it only; the indicator
    pipeline excludes the indicator from its vote.
    """

    def __init__(self, name: str, required: int, available: int) -> None:
        self.name = name
        self.required = required
        self.available = available
        super().__init__(
            f"{name} needs at least {required} bars, got {available}"
        )


class UpstreamUnavailableError(SignalGateError):
    """A price, sentiment or calendar provider failed or timed out."""
    pass


class InvariantViolation(SignalGateError):
    """A value is outside its documented bounds. Always a programming error."""
    pass
