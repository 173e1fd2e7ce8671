from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping

from .enums import OrderSide

if TYPE_CHECKING:
    from .models import Bar


@dataclass(frozen=True)
class Event:
    """
    Base class for all events moving through the engine.

    Events carry a timestamp to preserve ordering when multiple events
    are emitted at the same simulated time slice.
    """

    timestamp: datetime

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(ts={self.timestamp.isoformat()})"


@dataclass(frozen=True)
class MarketEvent(Event):
    """
    New bar for a particular symbol.
    """

    symbol: str
    bar: "Bar"


@dataclass(frozen=True)
class EndOfDayEvent(Event):
    """
    Close of a trading session; ``timestamp`` is the last bar seen that day.

    ``closes`` maps each symbol to its last close of the session, including
    bars outside market hours.
    """

    session_date: date
    closes: Mapping[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class FillEvent(Event):
    """
    Execution report returned by the venue.
    """

    order_id: str
    symbol: str
    quantity: int
    fill_price: Decimal
    commission: Decimal = Decimal("0")
    meta: Mapping[str, Any] = field(default_factory=dict)

    @property
    def side(self) -> OrderSide:
        return OrderSide.BUY if self.quantity > 0 else OrderSide.SELL


@dataclass(frozen=True)
class MetricsEvent(Event):
    """
    Periodic event carrying computed run metrics.
    """

    payload: Mapping[str, Any]
