#!/usr/bin/env python3
"""Command-line interface for the indicator engine."""

from __future__ import annotations

import argparse
import logging
import sys


def _load_inputs(args: argparse.Namespace):
    """Load bars and configuration named on the command line."""
    from ta_engine.config import load_indicator_config
    from ta_engine.data import load_bars_csv
    from ta_engine.types import IndicatorConfig

    bars = load_bars_csv(args.bars)
    config = load_indicator_config(args.config) if args.config else IndicatorConfig()
    return bars, config


def _latest_only(result):
    """Keep only the last point of every series."""
    return result.model_copy(
        update={
            "rsi": result.rsi[-1:],
            "macd": result.macd[-1:],
            "bollinger": result.bollinger[-1:],
            "sma": {period: s[-1:] for period, s in result.sma.items()},
            "ema": {period: s[-1:] for period, s in result.ema.items()},
        }
    )


def cmd_compute(args: argparse.Namespace) -> int:
    """Compute indicators for a CSV of bars and print them as JSON."""
    from ta_engine.engine import compute_indicators
    from ta_engine.exceptions import IndicatorError
    from ta_engine.formatting import round_result

    try:
        bars, config = _load_inputs(args)
        result = compute_indicators(bars, config)
    except IndicatorError as e:
        print(f"Error: {e}")
        return 1

    if args.precision is not None:
        result = round_result(
            result, precision=args.precision, macd_precision=max(args.precision, 4)
        )
    if args.latest:
        result = _latest_only(result)

    print(result.model_dump_json(indent=2))
    return 0


def cmd_signals(args: argparse.Namespace) -> int:
    """Classify the latest bar of a CSV and print the signals as JSON."""
    from ta_engine.engine import compute_indicators
    from ta_engine.exceptions import IndicatorError
    from ta_engine.signals import summarize_signals

    try:
        bars, config = _load_inputs(args)
        result = compute_indicators(bars, config)
        if not bars:
            print("Error: no bars in input")
            return 1
        summary = summarize_signals(result, bars[-1].close)
    except IndicatorError as e:
        print(f"Error: {e}")
        return 1

    print(summary.model_dump_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Technical indicator engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compute command
    compute_parser = subparsers.add_parser(
        "compute", help="Compute indicator series for a CSV of bars"
    )
    compute_parser.add_argument("bars", help="Path to CSV file of bars")
    compute_parser.add_argument(
        "-c", "--config", help="Path to YAML indicator configuration"
    )
    compute_parser.add_argument(
        "-p",
        "--precision",
        type=int,
        default=None,
        help="Round values to this many decimals (MACD keeps at least 4)",
    )
    compute_parser.add_argument(
        "--latest", action="store_true", help="Only print the last point of each series"
    )

    # Signals command
    signals_parser = subparsers.add_parser(
        "signals", help="Classify the latest bar of a CSV of bars"
    )
    signals_parser.add_argument("bars", help="Path to CSV file of bars")
    signals_parser.add_argument(
        "-c", "--config", help="Path to YAML indicator configuration"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "compute":
        return cmd_compute(args)
    elif args.command == "signals":
        return cmd_signals(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
