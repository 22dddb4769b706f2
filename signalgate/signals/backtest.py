"""Backtest source: historical strategy performance as a vote."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from signalgate.labels import Label, clamp_confidence
from signalgate.risk.drawdown import max_drawdown
from .types import SignalSource, no_vote

SOURCE_NAME = "backtest"

# profit factor reported when a record has wins and no losses
PROFIT_FACTOR_CAP = 999.0


@dataclass(frozen=True)
class PerformanceMetrics:
    """Summary of round-trip trades of one strategy. ``win_rate`` in %."""

    strategy: str
    total_trades: int
    win_rate: float
    profit_factor: float
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    total_pnl: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0


def _streaks(pnls: Sequence[float]) -> tuple[int, int]:
    best_win = best_loss = win = loss = 0
    for pnl in pnls:
        if pnl > 0:
            win, loss = win + 1, 0
        elif pnl < 0:
            win, loss = 0, loss + 1
        best_win = max(best_win, win)
        best_loss = max(best_loss, loss)
    return best_win, best_loss


def compute_performance(
    trade_pnls: Sequence[float],
    strategy: str = "strategy",
    periods_per_year: int = 252,
) -> PerformanceMetrics:
    """Derive :class:`PerformanceMetrics` from round-trip P&Ls, oldest first.

    Zero-P&L trades count towards the total but are neither wins nor losses.
    Sharpe is the per-trade mean over the population stdev, annualised with
    ``sqrt(periods_per_year)``.
    """
    pnls = np.asarray(list(trade_pnls), dtype=np.float64)
    if len(pnls) == 0:
        return PerformanceMetrics(strategy=strategy, total_trades=0, win_rate=0.0, profit_factor=0.0)
    if not np.isfinite(pnls).all():
        raise ValueError("trade P&Ls must be finite")

    wins = pnls[pnls > 0]
    losses = pnls[pnls < 0]
    gross_win = float(wins.sum())
    gross_loss = float(-losses.sum())

    if gross_loss > 0:
        profit_factor = gross_win / gross_loss
    else:
        profit_factor = PROFIT_FACTOR_CAP if gross_win > 0 else 0.0

    std = float(pnls.std())
    sharpe = float(pnls.mean() / std * math.sqrt(periods_per_year)) if std > 0 else 0.0
    win_streak, loss_streak = _streaks(pnls)

    return PerformanceMetrics(
        strategy=strategy,
        total_trades=len(pnls),
        win_rate=len(wins) / len(pnls) * 100,
        profit_factor=profit_factor,
        sharpe_ratio=sharpe,
        max_drawdown=max_drawdown(pnls),
        total_pnl=float(pnls.sum()),
        avg_win=float(wins.mean()) if len(wins) else 0.0,
        avg_loss=float(-losses.mean()) if len(losses) else 0.0,
        max_consecutive_wins=win_streak,
        max_consecutive_losses=loss_streak,
    )


def performance_label(win_rate: float, profit_factor: float) -> Label:
    if win_rate > 65 and profit_factor > 1.5:
        return Label.STRONG_BUY
    if win_rate > 55 and profit_factor > 1.2:
        return Label.BUY
    if win_rate < 25 or profit_factor < 0.6:
        return Label.STRONG_SELL
    if win_rate < 35 or profit_factor < 0.8:
        return Label.SELL
    return Label.NEUTRAL


def backtest_signal(metrics: Optional[PerformanceMetrics], weight: float = 1.0) -> SignalSource:
    if metrics is None or metrics.total_trades == 0:
        return no_vote(SOURCE_NAME, weight, "no backtest record")

    return SignalSource(
        source_name=SOURCE_NAME,
        label=performance_label(metrics.win_rate, metrics.profit_factor),
        confidence=clamp_confidence(metrics.win_rate),
        weight=weight,
        metadata={
            "strategy": metrics.strategy,
            "total_trades": metrics.total_trades,
            "win_rate": metrics.win_rate,
            "profit_factor": metrics.profit_factor,
            "sharpe_ratio": metrics.sharpe_ratio,
            "max_drawdown": metrics.max_drawdown,
        },
    )
