"""Plotting utilities for analysis reports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from signalgate.indicators import SMA, IndicatorPipeline  # noqa: E402

log = logging.getLogger(__name__)


def plot_analysis(
    df: pd.DataFrame,
    out_path: str | Path,
    support: Sequence[float] = (),
    resistance: Sequence[float] = (),
    title: str = "",
    sma_periods: Sequence[int] = (20, 50),
) -> None:
    """Plot close price with SMAs and key levels, and save as PNG.

    Parameters
    ----------
    df : pd.DataFrame
        Must contain ``time`` and ``close`` columns.
    out_path : str | Path
        Destination file path (e.g. ``reports/ARBUSDT_1h.png``).
    support, resistance : sequence of float
        Horizontal levels drawn dashed green / red.
    title : str
        Prefix for the chart title, typically the decision summary.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(14, 5))
    ax.plot(df["time"], df["close"], linewidth=0.8, color="#d4af37", label="close")

    overlays = IndicatorPipeline([SMA(p) for p in sma_periods if len(df) >= p], min_bars=1)
    for col, series in overlays.transform(df).items():
        ax.plot(df["time"], series, linewidth=0.6, label=col)

    for level in support:
        ax.axhline(level, color="tab:green", linestyle="--", linewidth=0.6, alpha=0.8)
    for level in resistance:
        ax.axhline(level, color="tab:red", linestyle="--", linewidth=0.6, alpha=0.8)

    span = f"{df['time'].iloc[0].date()} → {df['time'].iloc[-1].date()}"
    ax.set_title(f"{title}  ({span})" if title else f"Close Price  ({span})")
    ax.set_xlabel("Time")
    ax.set_ylabel("Price")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left", fontsize=8)
    fig.tight_layout()
    fig.savefig(out_path, dpi=100)
    plt.close(fig)

    log.info("Saved analysis plot → %s", out_path)
