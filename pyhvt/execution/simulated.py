import itertools
from datetime import datetime
from decimal import ROUND_FLOOR, Decimal
from typing import Dict

from pyhvt.core.events import FillEvent, MarketEvent
from pyhvt.core.interfaces import ExecutionHandler
from pyhvt.errors import ExecutionError


class SimulatedVenue(ExecutionHandler):
    """
    Fills intents immediately at the latest close seen for the symbol.

    ``enter_long`` buys as many whole shares as ``fraction`` of the cash
    allows; ``flatten`` sells the whole holding. Each fill is published as a
    :class:`FillEvent`.
    """

    def __init__(
        self,
        initial_cash: Decimal = Decimal("100000"),
        slippage: Decimal = Decimal("0"),
        commission: Decimal = Decimal("0"),
    ) -> None:
        super().__init__()
        if initial_cash <= 0:
            raise ValueError("initial_cash must be positive")
        self.initial_cash = initial_cash
        self.slippage = slippage
        self.commission = commission
        self.cash = initial_cash
        self._positions: Dict[str, int] = {}
        self._prices: Dict[str, Decimal] = {}
        self._timestamps: Dict[str, datetime] = {}
        self._sequence = itertools.count(1)

    def on_start(self) -> None:
        self.cash = self.initial_cash
        self._positions.clear()
        self._prices.clear()
        self._timestamps.clear()
        self._sequence = itertools.count(1)

    def on_market(self, event: MarketEvent) -> None:
        self._prices[event.symbol] = event.bar.close
        self._timestamps[event.symbol] = event.timestamp

    def position(self, symbol: str) -> int:
        return self._positions.get(symbol, 0)

    def equity(self) -> Decimal:
        inventory = sum(
            (qty * self._prices.get(symbol, Decimal("0")) for symbol, qty in self._positions.items()),
            Decimal("0"),
        )
        return self.cash + inventory

    def is_invested(self) -> bool:
        return any(qty != 0 for qty in self._positions.values())

    def enter_long(self, symbol: str, fraction: Decimal) -> None:
        if not Decimal("0") < fraction <= Decimal("1"):
            raise ExecutionError(f"fraction must be in (0, 1], got {fraction}")
        price = self._last_price(symbol) + self.slippage
        if price <= 0:
            raise ExecutionError(f"Non-positive fill price {price} for {symbol}")
        budget = self.cash * fraction - self.commission
        quantity = int((budget / price).to_integral_value(rounding=ROUND_FLOOR)) if budget > 0 else 0
        if quantity <= 0:
            raise ExecutionError(f"Insufficient cash {self.cash} to buy {symbol} at {price}")
        self._fill(symbol, quantity, price)

    def flatten(self, symbol: str) -> None:
        quantity = self.position(symbol)
        if quantity == 0:
            return
        price = self._last_price(symbol) - self.slippage
        self._fill(symbol, -quantity, price)

    def _last_price(self, symbol: str) -> Decimal:
        price = self._prices.get(symbol)
        if price is None:
            raise ExecutionError(f"No market data for symbol {symbol}")
        return price

    def _fill(self, symbol: str, quantity: int, price: Decimal) -> None:
        self._positions[symbol] = self.position(symbol) + quantity
        self.cash -= price * quantity
        self.cash -= self.commission
        self.bus.publish(
            FillEvent(
                timestamp=self._timestamps[symbol],
                order_id=f"{symbol}-{next(self._sequence)}",
                symbol=symbol,
                quantity=quantity,
                fill_price=price,
                commission=self.commission,
                meta={"slippage": self.slippage},
            )
        )
