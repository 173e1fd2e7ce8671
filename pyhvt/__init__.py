"""
High-Volume-Turn intraday strategy engine.

:mod:`pyhvt.core` holds the engine, events and interfaces; :mod:`pyhvt.data`
turns raw minute records into bars and feeds them; :mod:`pyhvt.strategies`
detects the HVT pattern and manages the resulting position;
:mod:`pyhvt.execution` and :mod:`pyhvt.analytics` provide the venue and
reporting collaborators. Everything re-exports here for convenience.
"""

from . import analytics, core, data, execution, strategies
from .analytics import OutcomeBook, RunStatistics, TradeLogReporter
from .config import load_engine_from_dict, load_engine_from_json
from .core import (
    BacktestEngine,
    Bar,
    EndOfDayEvent,
    EngineConfig,
    Event,
    EventBus,
    Exposure,
    FillEvent,
    MarketEvent,
    MetricsEvent,
    Outcome,
    OutcomeRecord,
)
from .data import DailyFileBarFeed, DailyFileLocator, InMemoryBarFeed, MarketHours, parse_line
from .errors import (
    ConfigurationError,
    DataError,
    ExecutionError,
    OutOfOrderInputError,
    ParseError,
    PersistenceError,
    PyHVTError,
)
from .execution import SimulatedVenue
from .logging import configure_logging, log_event
from .strategies import ExitRules, HVTRules, PositionManager, SlidingWindow, detect_hvt

__all__ = [
    "BacktestEngine",
    "EngineConfig",
    "EventBus",
    "Event",
    "MarketEvent",
    "EndOfDayEvent",
    "FillEvent",
    "MetricsEvent",
    "Exposure",
    "Outcome",
    "Bar",
    "OutcomeRecord",
    "DailyFileBarFeed",
    "DailyFileLocator",
    "InMemoryBarFeed",
    "MarketHours",
    "parse_line",
    "SlidingWindow",
    "HVTRules",
    "detect_hvt",
    "ExitRules",
    "PositionManager",
    "SimulatedVenue",
    "OutcomeBook",
    "RunStatistics",
    "TradeLogReporter",
    "PyHVTError",
    "ConfigurationError",
    "DataError",
    "ParseError",
    "OutOfOrderInputError",
    "ExecutionError",
    "PersistenceError",
    "log_event",
    "load_engine_from_dict",
    "load_engine_from_json",
    "configure_logging",
    "analytics",
    "core",
    "data",
    "execution",
    "strategies",
]
