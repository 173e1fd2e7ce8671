"""Logging helpers for PyHVT.

Usage:
    from pyhvt import configure_logging
    configure_logging(level="INFO")

Keeps setup lightweight; callers can further customize the root logger if needed.
"""

import logging
import sys
from dataclasses import asdict, is_dataclass
from typing import Optional

from pythonjsonlogger import jsonlogger

from pyhvt.core.events import Event

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", fmt: Optional[str] = None, json_format: bool = False) -> None:
    """Configure basic logging for applications using PyHVT.

    Parameters
    ----------
    level: str
        Logging level name, e.g. "DEBUG"/"INFO"/"WARNING".
    fmt: Optional[str]
        Optional log format string. Defaults to a concise human-friendly format.
        Ignored when ``json_format`` is True.
    json_format: bool
        Emit logs as JSON lines (asctime/levelname/name/message plus extras).
    """

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    # force=True so repeated calls (CLI, tests) swap handlers instead of stacking them
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)


def log_event(logger: logging.Logger, event: Event, level: str = "INFO", **extra: object) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not logger.isEnabledFor(numeric_level):
        return
    payload = {
        "event_type": event.__class__.__name__,
        "timestamp": getattr(event, "timestamp", None),
    }
    if hasattr(event, "symbol"):
        payload["symbol"] = getattr(event, "symbol")
    if is_dataclass(event):
        payload.update(asdict(event))
    logger.log(numeric_level, "event", extra={"event": payload, **extra})


__all__ = ["configure_logging", "log_event"]
