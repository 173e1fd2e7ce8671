import json
import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from pyhvt.analytics.export import export_metrics_json, export_outcomes_csv
from pyhvt.analytics.outcomes import OutcomeBook
from pyhvt.analytics.trade_log import TradeLogReporter
from pyhvt.core.enums import Outcome
from pyhvt.core.event_bus import EventBus
from pyhvt.core.events import FillEvent
from pyhvt.core.interfaces import OutcomeSink
from pyhvt.core.models import OutcomeRecord
from pyhvt.errors import PersistenceError


def _records() -> list[OutcomeRecord]:
    return [
        OutcomeRecord(datetime(2017, 1, 3, 10, 5), "AAPL", Decimal("100.40"), Decimal("0.40"), Outcome.WON),
        OutcomeRecord(datetime(2017, 1, 4, 11, 0), "AAPL", Decimal("99.80"), Decimal("-0.20"), Outcome.LOSS),
    ]


def test_outcome_book_summary_and_metrics() -> None:
    book = OutcomeBook()
    assert isinstance(book, OutcomeSink)
    assert book.emit_metrics() == []

    for record in _records():
        book.record_outcome(record)

    summary = book.summary()
    assert summary["trades"] == 2
    assert summary["wins"] == 1
    assert summary["losses"] == 1
    assert summary["win_rate"] == 0.5
    assert summary["realized_pnl"] == Decimal("0.20")
    assert summary["largest_loss"] == Decimal("-0.20")

    metrics = book.emit_metrics()
    assert len(metrics) == 1
    assert metrics[0].timestamp == datetime(2017, 1, 4, 11, 0)
    assert book.emit_metrics() == []


def test_outcome_book_frame() -> None:
    book = OutcomeBook()
    empty = book.to_frame()
    assert list(empty.columns) == ["symbol", "outcome", "close", "pnl"]
    assert empty.empty

    for record in _records():
        book.record_outcome(record)
    frame = book.to_frame()
    assert list(frame["outcome"]) == ["WON", "LOSS"]
    assert frame.index[0] == pd.Timestamp("2017-01-03 10:05")


def test_trade_log_writes_jsonl_and_sqlite(tmp_path: Path) -> None:
    jsonl_path = tmp_path / "logs" / "trades.jsonl"
    sqlite_path = tmp_path / "trades.db"
    reporter = TradeLogReporter(jsonl_path=jsonl_path, sqlite_path=sqlite_path)
    reporter.bind(EventBus())
    reporter.on_start()

    reporter.on_fill(
        FillEvent(
            timestamp=datetime(2017, 1, 3, 10, 4),
            order_id="AAPL-1",
            symbol="AAPL",
            quantity=998,
            fill_price=Decimal("100.2"),
        )
    )
    reporter.record_outcome(_records()[0])
    reporter.on_stop()

    lines = [json.loads(line) for line in jsonl_path.read_text(encoding="utf-8").splitlines()]
    assert [line["kind"] for line in lines] == ["fill", "outcome"]
    assert lines[0]["fill_price"] == "100.2"
    assert lines[1]["outcome"] == "WON"
    assert lines[1]["pnl"] == "0.40"

    conn = sqlite3.connect(sqlite_path)
    try:
        assert list(conn.execute("SELECT order_id, symbol, quantity FROM fills")) == [("AAPL-1", "AAPL", 998)]
        assert list(conn.execute("SELECT outcome, pnl FROM outcomes")) == [("WON", "0.40")]
    finally:
        conn.close()


def test_trade_log_requires_a_destination() -> None:
    with pytest.raises(PersistenceError):
        TradeLogReporter()


def test_exports(tmp_path: Path) -> None:
    csv_path = tmp_path / "out" / "outcomes.csv"
    export_outcomes_csv(csv_path, _records())
    frame = pd.read_csv(csv_path, dtype=str)
    assert list(frame.columns) == ["timestamp", "symbol", "outcome", "close", "pnl"]
    assert list(frame["pnl"]) == ["0.40", "-0.20"]

    json_path = tmp_path / "out" / "metrics.json"
    export_metrics_json(json_path, {"wins": 1, "realized_pnl": Decimal("0.20")})
    assert json.loads(json_path.read_text(encoding="utf-8")) == {"realized_pnl": "0.20", "wins": 1}
