from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Tuple

import pytest

from pyhvt.analytics.statistics import RunStatistics
from pyhvt.core.enums import Exposure, Outcome
from pyhvt.core.events import EndOfDayEvent, MarketEvent
from pyhvt.core.models import Bar, OutcomeRecord
from pyhvt.errors import ExecutionError
from pyhvt.strategies.position import ExitRules, PositionManager
from pyhvt.strategies.signals import detect_hvt

BASE = datetime(2017, 1, 3, 10, 0)


class FakeVenue:
    def __init__(self, fail_on_enter: bool = False) -> None:
        self.calls: List[Tuple[str, ...]] = []
        self.invested = False
        self.fail_on_enter = fail_on_enter

    def enter_long(self, symbol: str, fraction: Decimal) -> None:
        if self.fail_on_enter:
            raise ExecutionError("rejected")
        self.calls.append(("enter_long", symbol, str(fraction)))
        self.invested = True

    def flatten(self, symbol: str) -> None:
        self.calls.append(("flatten", symbol))
        self.invested = False

    def is_invested(self) -> bool:
        return self.invested

    @property
    def entries(self) -> int:
        return sum(1 for call in self.calls if call[0] == "enter_long")

    @property
    def flattens(self) -> int:
        return sum(1 for call in self.calls if call[0] == "flatten")


class ListSink:
    def __init__(self) -> None:
        self.records: List[OutcomeRecord] = []

    def record_outcome(self, record: OutcomeRecord) -> None:
        self.records.append(record)


class Tape:
    """Hands out bars one minute apart."""

    def __init__(self) -> None:
        self.minute = 0

    def bar(self, volume: str, open_: str, close: str) -> Bar:
        o, c = Decimal(open_), Decimal(close)
        bar = Bar(
            symbol="AAPL",
            timestamp=BASE + timedelta(minutes=self.minute),
            open=o,
            high=max(o, c),
            low=min(o, c),
            close=c,
            volume=Decimal(volume),
        )
        self.minute += 1
        return bar


def _hvt_bars(tape: Tape) -> List[Bar]:
    # third bar closes at 100.00, the entry reference
    return [
        tape.bar("100", "102.0", "101.5"),
        tape.bar("150", "101.5", "100.8"),
        tape.bar("250", "100.8", "100.00"),
        tape.bar("50", "100.0", "100.2"),
    ]


def _manager() -> Tuple[PositionManager, FakeVenue, ListSink, Tape]:
    venue = FakeVenue()
    sink = ListSink()
    manager = PositionManager(symbol="AAPL", venue=venue, reporters=[sink])
    return manager, venue, sink, Tape()


def _enter(manager: PositionManager, tape: Tape) -> None:
    manager.on_bar(tape.bar("10", "103.0", "102.5"))
    for bar in _hvt_bars(tape):
        manager.on_bar(bar)


def test_entry_on_fifth_bar_with_third_bar_as_reference() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)

    assert venue.calls == [("enter_long", "AAPL", "1")]
    assert manager.exposure == Exposure.LONG
    assert manager.bars_seen == 5
    assert manager.position.entry_reference_bar is not None
    assert manager.position.entry_reference_bar.close == Decimal("100.00")
    assert sink.records == []


def test_no_entry_when_pattern_completes_on_fourth_bar() -> None:
    manager, venue, _, tape = _manager()
    for bar in _hvt_bars(tape):
        manager.on_bar(bar)

    assert detect_hvt(manager.window.snapshot())
    assert venue.entries == 0
    assert manager.exposure == Exposure.FLAT


def test_stop_loss_exit() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)

    manager.on_bar(tape.bar("10", "100.0", "99.84"))

    assert venue.flattens == 1
    assert manager.exposure == Exposure.FLAT
    assert len(sink.records) == 1
    record = sink.records[0]
    assert record.outcome == Outcome.LOSS
    assert record.pnl == Decimal("-0.16")
    assert record.close == Decimal("99.84")
    assert manager.statistics.largest_loss == Decimal("-0.16")
    assert manager.statistics.largest_loss_timestamp == record.timestamp


def test_take_profit_exit() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)

    manager.on_bar(tape.bar("10", "100.2", "100.31"))

    assert venue.flattens == 1
    assert [r.outcome for r in sink.records] == [Outcome.WON]
    assert sink.records[0].pnl == Decimal("0.31")
    assert manager.statistics.wins == 1
    assert manager.statistics.largest_loss == Decimal("0")


def test_inside_band_holds_position() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)

    manager.on_bar(tape.bar("10", "100.0", "99.90"))
    manager.on_bar(tape.bar("10", "99.9", "100.30"))  # exactly take_profit does not exit
    manager.on_bar(tape.bar("10", "100.3", "99.85"))  # exactly -stop_loss does not exit

    assert venue.flattens == 0
    assert manager.exposure == Exposure.LONG
    assert sink.records == []


def test_signals_ignored_while_long() -> None:
    manager, venue, _, tape = _manager()
    _enter(manager, tape)

    second_pattern = [
        tape.bar("60", "100.2", "100.1"),
        tape.bar("90", "100.1", "100.0"),
        tape.bar("130", "100.0", "99.9"),
        tape.bar("10", "99.9", "100.05"),
    ]
    for bar in second_pattern:
        manager.on_bar(bar)

    assert detect_hvt(manager.window.snapshot())
    assert venue.entries == 1
    assert manager.exposure == Exposure.LONG


def test_reentry_after_exit() -> None:
    manager, venue, _, tape = _manager()
    _enter(manager, tape)
    manager.on_bar(tape.bar("10", "100.2", "100.40"))
    assert manager.exposure == Exposure.FLAT

    for bar in _hvt_bars(tape):
        manager.on_bar(bar)

    assert venue.entries == 2
    assert manager.exposure == Exposure.LONG


@pytest.mark.parametrize(
    "close, expected_pnl",
    [
        ("100.25", Decimal("0.25")),
        ("99.90", Decimal("-0.10")),
        ("100.00", Decimal("0.00")),
    ],
)
def test_end_of_day_flattens_regardless_of_pnl(close: str, expected_pnl: Decimal) -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)
    manager.on_bar(tape.bar("10", "100.2", close))
    assert manager.exposure == Exposure.LONG

    manager.on_end_of_day(EndOfDayEvent(timestamp=BASE + timedelta(minutes=30), session_date=BASE.date()))

    assert venue.flattens == 1
    assert manager.exposure == Exposure.FLAT
    assert manager.statistics.forced_exits == 1
    assert manager.statistics.realized_pnl == expected_pnl
    assert sink.records == []


def test_end_of_day_pnl_uses_session_close() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)

    # last close of the session came from a bar outside market hours
    event = EndOfDayEvent(
        timestamp=BASE + timedelta(hours=5, minutes=45),
        session_date=BASE.date(),
        closes={"AAPL": Decimal("99.0"), "MSFT": Decimal("60.0")},
    )
    manager.on_end_of_day(event)

    assert venue.flattens == 1
    assert manager.statistics.forced_exits == 1
    assert manager.statistics.realized_pnl == Decimal("-1.00")
    assert sink.records == []


def test_end_of_day_when_flat_does_nothing() -> None:
    manager, venue, _, _ = _manager()
    manager.on_end_of_day(EndOfDayEvent(timestamp=BASE, session_date=BASE.date()))
    assert venue.calls == []


def test_position_dropped_when_venue_reports_flat() -> None:
    manager, venue, sink, tape = _manager()
    _enter(manager, tape)
    venue.invested = False

    manager.on_bar(tape.bar("10", "100.0", "99.50"))

    assert manager.exposure == Exposure.FLAT
    assert venue.flattens == 0
    assert sink.records == []


def test_no_entry_while_venue_already_invested() -> None:
    manager, venue, _, tape = _manager()
    venue.invested = True
    _enter(manager, tape)
    assert venue.entries == 0


def test_venue_failure_propagates_and_keeps_flat() -> None:
    venue = FakeVenue(fail_on_enter=True)
    manager = PositionManager(symbol="AAPL", venue=venue)
    with pytest.raises(ExecutionError):
        _enter(manager, Tape())
    assert manager.exposure == Exposure.FLAT


def test_other_symbols_are_ignored() -> None:
    manager, venue, _, tape = _manager()
    bar = tape.bar("10", "1", "1")
    manager.on_market(MarketEvent(timestamp=bar.timestamp, symbol="MSFT", bar=bar))
    assert manager.bars_seen == 0


def test_largest_loss_only_moves_down() -> None:
    stats = RunStatistics()
    seen = []
    for pnl in ["-0.20", "-0.16", "-0.50", "-0.30"]:
        stats.record_loss(Decimal(pnl), BASE)
        seen.append(stats.largest_loss)
    assert seen == [Decimal("-0.20"), Decimal("-0.20"), Decimal("-0.50"), Decimal("-0.50")]
    assert stats.losses == 4


def test_largest_loss_tracks_worst_stop_across_trades() -> None:
    manager, _, sink, tape = _manager()
    _enter(manager, tape)
    manager.on_bar(tape.bar("10", "100.0", "99.70"))
    for bar in _hvt_bars(tape):
        manager.on_bar(bar)
    manager.on_bar(tape.bar("10", "100.0", "99.80"))

    assert [r.pnl for r in sink.records] == [Decimal("-0.30"), Decimal("-0.20")]
    assert manager.statistics.largest_loss == Decimal("-0.30")


def test_exit_rules_validation() -> None:
    with pytest.raises(ValueError):
        ExitRules(stop_loss=Decimal("0"))
    with pytest.raises(ValueError):
        ExitRules(fraction=Decimal("1.5"))
    with pytest.raises(ValueError):
        ExitRules(warmup_bars=3)
