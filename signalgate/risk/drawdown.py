"""Pure-math drawdown utilities: no side effects, no I/O."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


def compute_drawdown_pct(peak: float, current: float) -> float:
    """Return drawdown as a percentage of *peak*, clamped >= 0.

    ``(peak - current) / peak * 100``, or ``0.0`` when *peak* <= 0
    or *current* >= *peak*.
    """
    if peak <= 0:
        return 0.0
    dd = (peak - current) / peak * 100
    return max(dd, 0.0)


@dataclass(frozen=True)
class DrawdownState:
    """Immutable snapshot returned by :meth:`DrawdownTracker.update`."""

    peak: float
    drawdown: float
    drawdown_pct: float
    max_drawdown: float
    max_drawdown_pct: float


class DrawdownTracker:
    """High-water-mark tracker over a cumulative P&L (or equity) curve.

    Absolute drawdown is always tracked; the percentage form is only
    meaningful once the peak is positive.
    """

    def __init__(self, initial: float = 0.0) -> None:
        self._peak = initial
        self._max_drawdown = 0.0
        self._max_drawdown_pct = 0.0

    def update(self, current: float) -> DrawdownState:
        """Ingest *current* and return a frozen state snapshot."""
        if current > self._peak:
            self._peak = current

        dd = self._peak - current
        dd_pct = compute_drawdown_pct(self._peak, current)

        self._max_drawdown = max(self._max_drawdown, dd)
        self._max_drawdown_pct = max(self._max_drawdown_pct, dd_pct)

        return DrawdownState(
            peak=self._peak,
            drawdown=dd,
            drawdown_pct=dd_pct,
            max_drawdown=self._max_drawdown,
            max_drawdown_pct=self._max_drawdown_pct,
        )

    @property
    def max_drawdown(self) -> float:
        return self._max_drawdown

    @property
    def max_drawdown_pct(self) -> float:
        return self._max_drawdown_pct


def max_drawdown(pnls: Iterable[float], initial: float = 0.0) -> float:
    """Largest peak-to-trough drop of the cumulative sum of *pnls*."""
    tracker = DrawdownTracker(initial)
    equity = initial
    for pnl in pnls:
        equity += pnl
        tracker.update(equity)
    return tracker.max_drawdown
