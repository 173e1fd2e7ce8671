import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

from pyhvt.analytics.statistics import RunStatistics
from pyhvt.core.enums import Exposure, Outcome
from pyhvt.core.events import EndOfDayEvent, MarketEvent
from pyhvt.core.interfaces import OutcomeSink, Strategy, TradingVenue
from pyhvt.core.models import Bar, OutcomeRecord

from .signals import DEFAULT_RULES, HVTRules, detect_hvt
from .window import HVT_WINDOW, SlidingWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitRules:
    """Exit thresholds in absolute price units, measured from the entry reference close."""

    stop_loss: Decimal = Decimal("0.15")
    take_profit: Decimal = Decimal("0.30")
    fraction: Decimal = Decimal("1")
    warmup_bars: int = HVT_WINDOW

    def __post_init__(self) -> None:
        if self.stop_loss <= 0 or self.take_profit <= 0:
            raise ValueError("stop_loss and take_profit must be positive")
        if not Decimal("0") < self.fraction <= Decimal("1"):
            raise ValueError("fraction must be in (0, 1]")
        if self.warmup_bars < HVT_WINDOW:
            raise ValueError(f"warmup_bars must be at least {HVT_WINDOW}")


@dataclass(frozen=True)
class Position:
    """Open long trade; the default instance is flat."""

    entry_reference_bar: Optional[Bar] = None
    entry_bar: Optional[Bar] = None

    @property
    def is_open(self) -> bool:
        return self.entry_reference_bar is not None


class PositionManager(Strategy):
    """HVT entry plus stop-loss/take-profit/end-of-day exits for one symbol.

    Every accepted bar goes into a 4-bar window. Once more than
    ``warmup_bars`` bars have been seen, a flat manager enters long when the
    window shows the HVT pattern; the window's third bar becomes the P&L
    reference. A long manager exits on the first bar closing more than
    ``stop_loss`` below or ``take_profit`` above that reference (stop-loss
    wins when evaluated first), and is flattened at every session close,
    priced at the session's last close for the symbol.
    Signals are ignored while long.
    """

    def __init__(
        self,
        symbol: str,
        venue: TradingVenue,
        reporters: Sequence[OutcomeSink] = (),
        rules: HVTRules = DEFAULT_RULES,
        exits: ExitRules = ExitRules(),
        strategy_id: str = "hvt",
    ) -> None:
        super().__init__()
        self.symbol = symbol
        self.venue = venue
        self.reporters: List[OutcomeSink] = list(reporters)
        self.rules = rules
        self.exits = exits
        self.strategy_id = strategy_id
        self.window = SlidingWindow(HVT_WINDOW)
        self.bars_seen = 0
        self.position = Position()
        self.statistics = RunStatistics()
        self._last_bar: Optional[Bar] = None

    def on_start(self) -> None:
        self.window.clear()
        self.bars_seen = 0
        self.position = Position()
        self.statistics = RunStatistics()
        self._last_bar = None

    @property
    def exposure(self) -> Exposure:
        return Exposure.LONG if self.position.is_open else Exposure.FLAT

    def on_market(self, event: MarketEvent) -> None:
        if event.symbol != self.symbol:
            return
        self.on_bar(event.bar)

    def on_bar(self, bar: Bar) -> None:
        self.window.push(bar)
        self.bars_seen += 1
        self._last_bar = bar
        if self.bars_seen <= self.exits.warmup_bars:
            return

        self._sync_with_venue()
        if self.position.is_open:
            self._check_exits(bar)
            return
        if self.venue.is_invested():
            logger.debug("%s venue already invested, entry skipped", bar.timestamp)
            return

        window = self.window.snapshot()
        if detect_hvt(window, self.rules):
            self._enter(bar, window)

    def on_end_of_day(self, event: EndOfDayEvent) -> None:
        if not self.position.is_open:
            return
        close = event.closes.get(self.symbol)
        if close is None and self._last_bar is not None:
            close = self._last_bar.close
        pnl = self._pnl_at(close) if close is not None else Decimal("0")
        logger.info("%s end of day, flattening %s (pnl=%s)", event.timestamp, self.symbol, pnl)
        self.venue.flatten(self.symbol)
        self.statistics.record_forced_exit(pnl)
        self.position = Position()

    def _sync_with_venue(self) -> None:
        if self.position.is_open and not self.venue.is_invested():
            logger.warning("%s position open but venue is flat; dropping position", self.symbol)
            self.position = Position()

    def _enter(self, bar: Bar, window: Sequence[Bar]) -> None:
        b1, b2, b3, b4 = window
        logger.info("Volumes- v1:%s, v2:%s, v3:%s, v4:%s", b1.volume, b2.volume, b3.volume, b4.volume)
        logger.info("Price- p1:%s, p2:%s, p3:%s, p4:%s", b1.close, b2.close, b3.close, b4.close)
        self.venue.enter_long(self.symbol, self.exits.fraction)
        self.position = Position(entry_reference_bar=b3, entry_bar=bar)
        logger.info("%s purchased %s at %s", bar.timestamp, self.symbol, bar.close)

    def _pnl(self, bar: Bar) -> Decimal:
        return self._pnl_at(bar.close)

    def _pnl_at(self, close: Decimal) -> Decimal:
        assert self.position.entry_reference_bar is not None
        return close - self.position.entry_reference_bar.close

    def _check_exits(self, bar: Bar) -> None:
        pnl = self._pnl(bar)
        if pnl < -self.exits.stop_loss:
            self._report(bar, pnl, Outcome.LOSS)
            if self.statistics.record_loss(pnl, bar.timestamp):
                logger.info("%s largest loss is: %s", bar.timestamp, pnl)
            self._exit()
        elif pnl > self.exits.take_profit:
            self._report(bar, pnl, Outcome.WON)
            self.statistics.record_win(pnl)
            self._exit()

    def _report(self, bar: Bar, pnl: Decimal, outcome: Outcome) -> None:
        record = OutcomeRecord(
            timestamp=bar.timestamp,
            symbol=self.symbol,
            close=bar.close,
            pnl=pnl,
            outcome=outcome,
        )
        logger.warning("'%s','%s','%s','%s'", bar.timestamp, outcome.value, bar.close, pnl)
        for sink in self.reporters:
            sink.record_outcome(record)

    def _exit(self) -> None:
        self.venue.flatten(self.symbol)
        self.position = Position()
