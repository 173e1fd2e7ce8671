"""
Core primitives for the bar-driven engine.

Exports the engine, event bus, event models, enums, value types and
component interfaces used throughout the system.
"""

from .enums import Exposure, OrderSide, Outcome
from .event_bus import EventBus
from .events import EndOfDayEvent, Event, FillEvent, MarketEvent, MetricsEvent
from .interfaces import (
    BusParticipant,
    DataFeed,
    ExecutionHandler,
    OutcomeSink,
    PerformanceReporter,
    Strategy,
    TradingVenue,
)
from .models import Bar, OutcomeRecord
from .engine import BacktestEngine, EngineConfig

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
    "OrderSide",
    "Outcome",
    "Bar",
    "OutcomeRecord",
    "BusParticipant",
    "DataFeed",
    "Strategy",
    "ExecutionHandler",
    "PerformanceReporter",
    "TradingVenue",
    "OutcomeSink",
]
