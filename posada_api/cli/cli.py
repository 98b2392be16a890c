"""
Command-line interface implementation.
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..config import ConfigurationManager
from ..market import snapshot_prices
from ..market_system import MarketSystem
from ..price_history import SnapshotHistory


def setup_logging(level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def _format_ts(ts: int) -> str:
    if not ts:
        return "never"
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')


def format_history_info(history: SnapshotHistory, now: int) -> str:
    """Format a summary of the stored price history."""
    lines = [
        "\nPRICE HISTORY",
        "=" * 40,
        f"Last Snapshot: {_format_ts(history.last_snapshot_time)}",
        f"Snapshots Retained: {len(history.snapshots)}",
    ]

    if history.snapshots:
        oldest = history.snapshots[0].timestamp
        newest = history.snapshots[-1].timestamp
        lines.append(f"Oldest: {_format_ts(oldest)} ({(now - oldest) / 3600:.1f}h ago)")
        lines.append(f"Newest: {_format_ts(newest)} ({(now - newest) / 3600:.1f}h ago)")
        lines.append(f"Symbols Tracked: {len(history.symbols())}")
    else:
        lines.append("No snapshots recorded yet")

    return "\n".join(lines)


def format_change(symbol: str, price: float, change: Optional[float]) -> str:
    if change is None:
        return f"{symbol} at {price}: 24h change unavailable (not enough history)"
    return f"{symbol} at {price}: {change:+.2f}% over 24h"


def clear_cache(system: MarketSystem, target: str) -> List[str]:
    """Delete one cache key, or every response cache when target is 'all'."""
    return system.cache.clear(None if target == 'all' else target)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Posada Market API - cached Cardano token market data served as JSON"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP API server"
    )

    parser.add_argument(
        "--host",
        type=str,
        help="Address to bind the server to (overrides config)"
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (overrides config)"
    )

    parser.add_argument(
        "--snapshot",
        action="store_true",
        help="Fetch current prices and record an hourly snapshot if one is due"
    )

    parser.add_argument(
        "--history-info",
        action="store_true",
        help="Show a summary of the stored price history"
    )

    parser.add_argument(
        "--change",
        nargs=2,
        metavar=("SYMBOL", "PRICE"),
        help="Compute the 24h change of SYMBOL at PRICE against stored history"
    )

    parser.add_argument(
        "--clear-cache",
        type=str,
        nargs="?",
        const="all",
        help="Clear cached upstream responses (specify a cache key or 'all')"
    )

    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.config and not Path(args.config).exists():
            logger.error(f"Configuration file not found: {args.config}")
            sys.exit(1)

        config = ConfigurationManager().load_config(args.config)
        logger.info(f"Data directory: {config.data_dir}")
        logger.info(f"Snapshot interval: {config.snapshot_interval_seconds}s, "
                    f"retention: {config.history_retention_seconds}s")

        if args.validate_config:
            logger.info("Configuration validation successful")
            return

        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port

        system = MarketSystem(config)
        now = int(system.clock())

        if args.clear_cache:
            cleared = clear_cache(system, args.clear_cache)
            print(f"Cleared {len(cleared)} cache entr{'y' if len(cleared) == 1 else 'ies'}"
                  + (f": {', '.join(cleared)}" if cleared else ""))
            return

        if args.snapshot:
            tokens = system.tokens.get_tokens()
            if not tokens:
                logger.error("No token prices available; snapshot skipped")
                sys.exit(1)
            history = system.snapshot_store.record_if_due(snapshot_prices(tokens), now=now)
            if history.last_snapshot_time == now:
                print(f"Recorded snapshot of {len(tokens)} tokens")
            else:
                print(f"Snapshot not due; last taken {_format_ts(history.last_snapshot_time)}")
            print(format_history_info(history, now))
            return

        if args.history_info:
            print(format_history_info(system.snapshot_store.load(), now))
            return

        if args.change:
            symbol, raw_price = args.change
            try:
                price = float(raw_price)
            except ValueError:
                logger.error(f"Invalid price: {raw_price}")
                sys.exit(1)
            history = system.snapshot_store.load()
            change = system.change_calculator.change(history, symbol.upper(), price, now=now)
            print(format_change(symbol.upper(), price, change))
            return

        if args.serve:
            from ..api import create_app

            app = create_app(config, system=system)
            logger.info(f"Serving on http://{config.host}:{config.port}")
            app.run(host=config.host, port=config.port)
            return

        parser.print_help()

    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
