from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from .enums import Outcome
from .events import MarketEvent


@dataclass(frozen=True)
class Bar:
    """
    One OHLCV bar for a single instrument.

    Prices and volume are ``Decimal`` so repeated threshold comparisons
    do not drift.

    Attributes:
        symbol: instrument ticker
        timestamp: bar start, minute resolution
        open: opening price
        high: highest price
        low: lowest price
        close: closing price
        volume: traded volume
    """

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    @property
    def value(self) -> Decimal:
        return self.close

    @property
    def body(self) -> Decimal:
        return self.close - self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    def as_event(self) -> MarketEvent:
        """
        Convert the bar into a market event.
        """

        return MarketEvent(timestamp=self.timestamp, symbol=self.symbol, bar=self)


@dataclass(frozen=True)
class OutcomeRecord:
    """Realized win/loss of one closed trade, measured against the entry reference close."""

    timestamp: datetime
    symbol: str
    close: Decimal
    pnl: Decimal
    outcome: Outcome
