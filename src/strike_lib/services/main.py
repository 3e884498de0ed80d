"""
Command-line entry point for the scheduled metric jobs.

Subcommands (each takes a symbols file, one ticker per line):

    calc-range    true-range metrics   -> true_range table
    calc-drop     drawdown metrics     -> max_drop_periods table
    calc-sharpe   Sharpe ratios        -> sharpe_ratio table
    strike-bands  strike bands from stored metrics (+ optional CSV report)
    perform-all   all of the above in one pass

Candles are read from the SQLite store (``--db`` / ``DB_PATH``); fetching
them from a market-data API is a separate job.  Engine settings come from
the environment (see ``EngineConfig.from_env``).

Examples:
    strike-engine calc-range data/symbols.csv
    strike-engine strike-bands data/symbols.csv --side put --report out/bands.csv
    LOG_FORMAT=json strike-engine perform-all data/symbols.csv --db /data/data.db
"""

import argparse
import sys
from datetime import date
from typing import Optional

from src.strike_lib.core.config import EngineConfig
from src.strike_lib.core.logging_config import get_logger, setup_logging
from src.strike_lib.core.models import OptionSide
from src.strike_lib.services import runner, store
from src.strike_lib.services.expiry_calendar import days_to_expiry, expiration_window
from src.strike_lib.services.report import write_strike_report
from src.strike_lib.services.symbols import read_symbols

logger = get_logger("strike.main")

COMMANDS = ("calc-range", "calc-drop", "calc-sharpe", "strike-bands", "perform-all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strike-engine",
        description="Risk metrics and strike bands for an options-selling strategy",
    )
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("symbols_file", help="Path to the symbols file (one ticker per line)")
    parser.add_argument("--db", default=None, help="SQLite database path (default: $DB_PATH)")
    parser.add_argument(
        "--side",
        default="put",
        help="Option side for strike bands: put or call (default: put)",
    )
    parser.add_argument(
        "--period",
        type=int,
        default=None,
        help="Use the stored drop metric of this period instead of the true-range metric",
    )
    parser.add_argument(
        "--dte",
        type=int,
        default=None,
        help="Days to expiry (default: start of the next expiry window)",
    )
    parser.add_argument("--report", default="", help="Write strike bands to this CSV file")
    parser.add_argument("--log-format", default=None, choices=("console", "json"))
    parser.add_argument("--log-level", default=None)
    return parser


def _resolve_dte(dte: Optional[int]) -> int:
    if dte is not None:
        return dte
    start, _ = expiration_window()
    return days_to_expiry(start)


def run(args: argparse.Namespace, config: EngineConfig) -> int:
    side = OptionSide.parse(args.side)
    symbols = read_symbols(args.symbols_file)
    db = args.db
    store.init_db(db)

    def load_candles(symbol: str):
        return store.get_candles(symbol, config.candle_count, db_path=db)

    if args.command == "calc-range":
        result = runner.run_range_metrics(symbols, load_candles, config)
        store.save_true_ranges(result.items, db_path=db)
    elif args.command == "calc-drop":
        result = runner.run_drop_metrics(symbols, load_candles, config)
        store.save_max_drops(result.items, db_path=db)
    elif args.command == "calc-sharpe":
        result = runner.run_sharpe_metrics(symbols, load_candles, config)
        store.save_sharpe_ratios(result.items, db_path=db)
    elif args.command == "strike-bands":
        if args.period is not None:

            def load_metric(symbol: str):
                return store.get_max_drop(symbol, args.period, db_path=db)

        else:

            def load_metric(symbol: str):
                return store.get_true_range(symbol, db_path=db)

        result = runner.run_strike_bands(
            symbols, load_candles, load_metric, _resolve_dte(args.dte), config, side=side
        )
        if args.report:
            write_strike_report(result.items, args.report)
    else:
        summary = runner.run_all(symbols, load_candles, config, _resolve_dte(args.dte), side=side)
        store.save_true_ranges(summary.ranges.items, db_path=db)
        store.save_max_drops(summary.drops.items, db_path=db)
        store.save_sharpe_ratios(summary.sharpes.items, db_path=db)
        if args.report:
            write_strike_report(summary.bands.items, args.report)
        result = summary.bands

    logger.info(
        "job_finished",
        command=args.command,
        symbols=len(symbols),
        skipped=sorted(result.skipped),
        run_date=date.today().isoformat(),
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(service="strike-engine", level=args.log_level, log_format=args.log_format)
    config = EngineConfig.from_env()
    try:
        return run(args, config)
    except FileNotFoundError as exc:
        logger.error("symbols_file_missing", error=str(exc))
        return 2


if __name__ == "__main__":
    sys.exit(main())
