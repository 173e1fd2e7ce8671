from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional, Protocol, runtime_checkable

from .event_bus import EventBus
from .events import EndOfDayEvent, FillEvent, MarketEvent, MetricsEvent
from .models import OutcomeRecord

__all__ = [
    "BusParticipant",
    "DataFeed",
    "Strategy",
    "ExecutionHandler",
    "PerformanceReporter",
    "TradingVenue",
    "OutcomeSink",
]


@runtime_checkable
class TradingVenue(Protocol):
    """
    Capabilities the position logic needs from wherever orders end up.

    Calls are synchronous; failures raise :class:`pyhvt.errors.ExecutionError`.
    """

    def enter_long(self, symbol: str, fraction: Decimal) -> None:
        ...

    def flatten(self, symbol: str) -> None:
        ...

    def is_invested(self) -> bool:
        ...


@runtime_checkable
class OutcomeSink(Protocol):
    """
    Receives realized win/loss records.
    """

    def record_outcome(self, record: OutcomeRecord) -> None:
        ...


class BusParticipant(ABC):
    """
    Base class for components that need access to the event bus.
    """

    def __init__(self) -> None:
        self._bus: Optional[EventBus] = None

    def bind(self, bus: EventBus) -> None:
        self._bus = bus

    @property
    def bus(self) -> EventBus:
        if self._bus is None:
            raise RuntimeError("Component not bound to an EventBus.")
        return self._bus

    def on_start(self) -> None:
        """
        Lifecycle hook invoked before the run starts dispatching events.
        """

    def on_stop(self) -> None:
        """
        Lifecycle hook invoked once the run completes.
        """


class DataFeed(BusParticipant):
    """
    Source of market data feeding the engine with market events.
    """

    @abstractmethod
    def prime(self) -> None:
        """
        Prepare internal state (seek to start date, open files, etc.).
        """

    @abstractmethod
    def has_next(self) -> bool:
        """
        Return True while additional bars remain.
        """

    @abstractmethod
    def next(self) -> None:
        """
        Publish the next market event to the bus.
        """


class Strategy(BusParticipant):
    """
    Reacts to accepted bars and session closes.
    """

    @abstractmethod
    def on_market(self, event: MarketEvent) -> None:
        """
        Strategy reaction to a bar that passed the market-hours filter.
        """

    def on_end_of_day(self, event: EndOfDayEvent) -> None:
        """
        Hook invoked when a trading session closes.
        """


class ExecutionHandler(BusParticipant):
    """
    Executes intents and publishes fills.
    """

    def on_market(self, event: MarketEvent) -> None:
        """
        Observe every bar (filtered or not) before strategies act on it.
        """


class PerformanceReporter(BusParticipant):
    """
    Records fills and periodically emits metrics.
    """

    def on_fill(self, event: FillEvent) -> None:
        """
        Accumulate state given a new fill.
        """

    def on_end_of_day(self, event: EndOfDayEvent) -> None:
        """
        Hook invoked when a trading session closes.
        """

    def emit_metrics(self) -> Iterable[MetricsEvent]:
        """
        Create metrics events to report current state.
        """

        return []
