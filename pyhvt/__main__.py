"""CLI entrypoint for running HVT backtests from JSON config.

Usage:
    python -m pyhvt --config path/to/config.json [--log-level INFO] [--json-logs]
"""

import argparse
import logging
import sys
from pathlib import Path

from pyhvt import configure_logging, load_engine_from_json
from pyhvt.errors import PyHVTError
from pyhvt.strategies import PositionManager

logger = logging.getLogger("pyhvt")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the HVT strategy from config.")
    parser.add_argument("--config", type=Path, required=True, help="Path to JSON config file")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, json_format=args.json_logs)
    try:
        engine = load_engine_from_json(args.config)
        engine.run()
    except PyHVTError as exc:
        logger.error("Run failed: %s", exc)
        return 1

    for strategy in engine.strategies:
        if isinstance(strategy, PositionManager):
            stats = strategy.statistics
            logger.info(
                "%s: wins=%d losses=%d forced_exits=%d realized_pnl=%s largest_loss=%s at %s",
                strategy.symbol,
                stats.wins,
                stats.losses,
                stats.forced_exits,
                stats.realized_pnl,
                stats.largest_loss,
                stats.largest_loss_timestamp,
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
