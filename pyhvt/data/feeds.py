from abc import abstractmethod
from typing import Iterator, List, Optional, Sequence

from pyhvt.core.events import MarketEvent
from pyhvt.core.interfaces import DataFeed
from pyhvt.core.models import Bar
from pyhvt.errors import OutOfOrderInputError


class BarStreamFeed(DataFeed):
    """
    Publishes one market event per ``next()`` from a lazily produced bar stream.
    """

    def __init__(self) -> None:
        super().__init__()
        self._iterator: Optional[Iterator[Bar]] = None
        self._pending: Optional[MarketEvent] = None

    @abstractmethod
    def _iter_bars(self) -> Iterator[Bar]:
        """Yield bars in ascending timestamp order."""

    def prime(self) -> None:
        self._iterator = self._iter_bars()
        self._pending = None

    def has_next(self) -> bool:
        if self._iterator is None:
            raise RuntimeError("Data feed not primed. Call prime() before iteration.")
        if self._pending is not None:
            return True
        bar = next(self._iterator, None)
        if bar is None:
            return False
        self._pending = bar.as_event()
        return True

    def next(self) -> None:
        if not self.has_next():
            return
        event, self._pending = self._pending, None
        self.bus.publish(event)


class InMemoryBarFeed(BarStreamFeed):
    """
    Deterministic feed over preloaded bars; timestamps must strictly increase.
    """

    def __init__(self, bars: Sequence[Bar]) -> None:
        super().__init__()
        self._bars: List[Bar] = list(bars)
        self._validate_monotonic()

    def _iter_bars(self) -> Iterator[Bar]:
        return iter(self._bars)

    def _validate_monotonic(self) -> None:
        for previous, current in zip(self._bars, self._bars[1:]):
            if current.timestamp <= previous.timestamp:
                raise OutOfOrderInputError(
                    f"Bars must be strictly increasing in time: {current.timestamp} after {previous.timestamp}"
                )
