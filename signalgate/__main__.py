"""Entry point: ``python -m signalgate <command> [args...]``."""

import argparse
import logging
import sys

log = logging.getLogger(__name__)


def main(argv=None):
    p = argparse.ArgumentParser(prog="signalgate", description="Signal aggregation and trade gating")
    sub = p.add_subparsers(dest="command")

    a = sub.add_parser("analyze", help="Analyse the latest bars of one symbol")
    a.add_argument("--config", help="Path to YAML config file (defaults when omitted)")
    a.add_argument("--data-dir", required=True, help="Directory holding <symbol>_<timeframe>*.csv")
    a.add_argument("--symbol", required=True)
    a.add_argument("--timeframe", required=True)
    a.add_argument("--events", help="YAML list of economic events")
    a.add_argument("--trades", help="CSV of round-trip trades with a 'pnl' column")
    a.add_argument("--plot", help="Write a price chart PNG here")
    a.add_argument("--json", help="Write the full report as JSON here")

    args = p.parse_args(sys.argv[1:] if argv is None else argv)

    if args.command != "analyze":
        logging.basicConfig(level=logging.INFO)
        p.print_usage(sys.stderr)
        log.error("Available commands: analyze")
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%H:%M:%S",
    )

    from signalgate.engine.runner import run_analysis_cli
    report = run_analysis_cli(
        args.config,
        args.data_dir,
        args.symbol,
        args.timeframe,
        events_path=args.events,
        trades_path=args.trades,
        plot_path=args.plot,
        json_path=args.json,
    )
    log.info("Finished: %s", report.decision.direction.value)


if __name__ == "__main__":
    main()
