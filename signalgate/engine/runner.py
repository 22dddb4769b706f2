"""Command-line run: CSV snapshots → analysis → log, JSON report and chart."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from signalgate.config import EngineConfig, load_config
from signalgate.engine.core import AnalysisEngine, AnalysisReport
from signalgate.market import CsvPriceSource, StaticCalendarFeed, bars_to_frame, load_events
from signalgate.reporting.plots import plot_analysis
from signalgate.signals import PerformanceMetrics, compute_performance

log = logging.getLogger(__name__)


def load_performance(path: str | Path, strategy: Optional[str] = None) -> PerformanceMetrics:
    """Read round-trip trades (one ``pnl`` column, oldest first) from CSV."""
    path = Path(path)
    trades = pd.read_csv(path)
    if "pnl" not in trades.columns:
        raise ValueError(f"{path}: missing 'pnl' column")
    metrics = compute_performance(trades["pnl"].tolist(), strategy=strategy or path.stem)
    log.info(
        "Backtest record %s: %d trades, win rate %.1f%%, PF %.2f",
        metrics.strategy, metrics.total_trades, metrics.win_rate, metrics.profit_factor,
    )
    return metrics


def run_analysis_cli(
    config_path: Optional[str],
    data_dir: str,
    symbol: str,
    timeframe: str,
    events_path: Optional[str] = None,
    trades_path: Optional[str] = None,
    plot_path: Optional[str] = None,
    json_path: Optional[str] = None,
) -> AnalysisReport:
    """Run one analysis from files on disk and write the requested artifacts."""
    config = load_config(config_path) if config_path else EngineConfig()
    price_source = CsvPriceSource(data_dir)

    calendar_feed = StaticCalendarFeed(load_events(events_path)) if events_path else None
    performance = load_performance(trades_path) if trades_path else None

    engine = AnalysisEngine(
        price_source,
        config=config,
        calendar_feed=calendar_feed,
        performance=performance,
    )
    report = engine.analyze(symbol, timeframe)

    for s in report.sources:
        log.info("  %-10s %-12s conf=%5.1f  weight=%.2f",
                 s.source_name, s.label.value, s.confidence, s.weight)
    log.info("Aggregate: %s  score=%.2f  confidence=%.0f  accuracy=%.0f",
             report.aggregate.overall_label.value, report.aggregate.final_score,
             report.aggregate.overall_confidence, report.aggregate.accuracy_estimate)
    log.info("Risk: %s", report.risk.recommendation)
    log.info("Decision: %s", report.decision.explanation)

    if json_path:
        out = Path(json_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(report.to_dict(), indent=2), encoding="utf-8")
        log.info("Wrote %s", out)

    if plot_path:
        bars = price_source.get_recent_bars(symbol, timeframe, config.analysis.bar_count)
        structure = report.source("structure")
        levels = structure.metadata if structure is not None else {}
        plot_analysis(
            bars_to_frame(bars),
            plot_path,
            support=levels.get("support", ()),
            resistance=levels.get("resistance", ()),
            title=f"{symbol} {timeframe}: {report.decision.direction.value}",
        )

    return report
