import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from uuid import uuid4

from .event_bus import EventBus
from .events import EndOfDayEvent, FillEvent, MarketEvent, MetricsEvent
from .interfaces import BusParticipant, DataFeed, ExecutionHandler, PerformanceReporter, Strategy
from pyhvt.data.filters import MarketHours
from pyhvt.errors import OutOfOrderInputError
from pyhvt.logging import log_event

SessionFilter = Callable[[datetime], bool]


@dataclass
class EngineConfig:
    """
    Lightweight configuration bundle for the engine.
    """

    name: str = "hvt"
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    enforce_order: bool = True
    run_id: str = field(default_factory=lambda: uuid4().hex[:8])


class BacktestEngine:
    """
    Drives bars from a feed through the market-hours filter into strategies.

    Trading-day boundaries are derived from bar timestamps: the first bar of
    a new date closes the previous session, and the last session is closed
    once the feed runs dry.
    """

    def __init__(
            self,
            data_feed: DataFeed,
            strategies: Sequence[Strategy],
            execution: ExecutionHandler,
            reporters: Optional[Sequence[PerformanceReporter]] = None,
            session_filter: Optional[SessionFilter] = None,
            bus: Optional[EventBus] = None,
            config: Optional[EngineConfig] = None,
    ) -> None:
        self.data_feed = data_feed
        self.strategies: List[Strategy] = list(strategies)
        self.execution = execution
        self.reporters: List[PerformanceReporter] = list(reporters or [])
        self.session_filter: SessionFilter = session_filter or MarketHours()
        self.bus = bus or EventBus()
        self.config = config or EngineConfig()
        self._running: bool = False
        self._logger = logging.getLogger(__name__)

        self._last_timestamp: Optional[datetime] = None
        self._session_date: Optional[date] = None
        self._session_closes: Dict[str, Decimal] = {}
        self.bars_accepted = 0
        self.bars_rejected = 0
        self.sessions_closed = 0

        self._bind_components()
        self._register_routes()

    def _bind_components(self) -> None:
        for component in self._components:
            component.bind(self.bus)

    @property
    def _components(self) -> Iterable[BusParticipant]:
        yield self.data_feed
        yield from self.strategies
        yield self.execution
        yield from self.reporters

    def _register_routes(self) -> None:
        self.bus.subscribe(MarketEvent, self._route_market)
        self.bus.subscribe(FillEvent, self._route_fill)

    def run(self) -> None:
        if self._running:
            raise RuntimeError("BacktestEngine is already running.")

        self._running = True
        self._last_timestamp = None
        self._session_date = None
        self._session_closes.clear()
        cycle = 0
        try:
            self._logger.info("Starting run '%s' run_id=%s", self.config.name, self.config.run_id)
            for component in self._components:
                component.on_start()

            self.data_feed.prime()

            while self.data_feed.has_next():
                self.data_feed.next()
                self.bus.dispatch()
                self._emit_metrics()
                cycle += 1

            if self._session_date is not None:
                self._close_session()
                self.bus.dispatch()
                self._emit_metrics()
        finally:
            for component in self._components:
                component.on_stop()
            self._running = False
            self._logger.info(
                "Run '%s' completed (cycles=%d, accepted=%d, rejected=%d, sessions=%d, run_id=%s)",
                self.config.name,
                cycle,
                self.bars_accepted,
                self.bars_rejected,
                self.sessions_closed,
                self.config.run_id,
            )

    def _route_market(self, event: MarketEvent) -> None:
        log_event(self._logger, event, level="DEBUG")
        self._check_order(event)

        event_date = event.timestamp.date()
        if self._session_date is not None and event_date != self._session_date:
            self._close_session()
        self._session_date = event_date
        self._last_timestamp = event.timestamp
        self._session_closes[event.symbol] = event.bar.close

        self.execution.on_market(event)

        if not self.session_filter(event.timestamp):
            self.bars_rejected += 1
            self._logger.debug("%s outside market hours, skipped", event.timestamp)
            return

        self.bars_accepted += 1
        for strategy in self.strategies:
            strategy.on_market(event)

    def _check_order(self, event: MarketEvent) -> None:
        if self._last_timestamp is None or event.timestamp > self._last_timestamp:
            return
        message = f"Bar at {event.timestamp} does not follow {self._last_timestamp}"
        if self.config.enforce_order:
            raise OutOfOrderInputError(message)
        self._logger.warning(message)

    def _close_session(self) -> None:
        assert self._session_date is not None and self._last_timestamp is not None
        event = EndOfDayEvent(
            timestamp=self._last_timestamp,
            session_date=self._session_date,
            closes=dict(self._session_closes),
        )
        self._session_closes.clear()
        log_event(self._logger, event, level="DEBUG")
        for strategy in self.strategies:
            strategy.on_end_of_day(event)
        for reporter in self.reporters:
            reporter.on_end_of_day(event)
        self.sessions_closed += 1

    def _route_fill(self, event: FillEvent) -> None:
        log_event(self._logger, event, level="DEBUG")
        for reporter in self.reporters:
            reporter.on_fill(event)

    def _emit_metrics(self) -> None:
        metrics_events: List[MetricsEvent] = []
        for reporter in self.reporters:
            metrics_events.extend(reporter.emit_metrics())
        if not metrics_events:
            return
        self.bus.publish_all(metrics_events)
        self.bus.dispatch()
