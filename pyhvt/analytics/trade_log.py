import json
import sqlite3
from pathlib import Path
from typing import IO, Any, Dict, Optional

from pyhvt.core.events import FillEvent
from pyhvt.core.interfaces import PerformanceReporter
from pyhvt.core.models import OutcomeRecord
from pyhvt.errors import PersistenceError


class TradeLogReporter(PerformanceReporter):
    """Persists fills and win/loss records to JSONL and/or SQLite for auditing."""

    def __init__(
        self,
        jsonl_path: Optional[Path] = None,
        sqlite_path: Optional[Path] = None,
    ) -> None:
        super().__init__()
        if jsonl_path is None and sqlite_path is None:
            raise PersistenceError("At least one of jsonl_path or sqlite_path must be set")
        self.jsonl_path = jsonl_path
        self.sqlite_path = sqlite_path
        self._jsonl_file: Optional[IO[str]] = None
        self._conn: Optional[sqlite3.Connection] = None

    def on_start(self) -> None:
        try:
            if self.jsonl_path is not None:
                self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
                self._jsonl_file = self.jsonl_path.open("a", encoding="utf-8")
            if self.sqlite_path is not None:
                self.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(self.sqlite_path)
                self._conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS fills (
                        ts TEXT,
                        order_id TEXT,
                        symbol TEXT,
                        quantity INTEGER,
                        fill_price TEXT,
                        commission TEXT
                    );
                    CREATE TABLE IF NOT EXISTS outcomes (
                        ts TEXT,
                        symbol TEXT,
                        outcome TEXT,
                        close TEXT,
                        pnl TEXT
                    );
                    """
                )
                self._conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot open trade log: {exc}") from exc

    def on_stop(self) -> None:
        if self._jsonl_file:
            self._jsonl_file.close()
            self._jsonl_file = None
        if self._conn:
            self._conn.commit()
            self._conn.close()
            self._conn = None

    def _write_jsonl(self, record: Dict[str, Any]) -> None:
        if self._jsonl_file:
            self._jsonl_file.write(json.dumps(record, ensure_ascii=False) + "\n")
            self._jsonl_file.flush()

    def on_fill(self, event: FillEvent) -> None:
        record = {
            "kind": "fill",
            "ts": event.timestamp.isoformat(),
            "order_id": event.order_id,
            "symbol": event.symbol,
            "side": event.side.value,
            "quantity": event.quantity,
            "fill_price": str(event.fill_price),
            "commission": str(event.commission),
        }
        self._write_jsonl(record)
        if self._conn:
            self._conn.execute(
                "INSERT INTO fills (ts, order_id, symbol, quantity, fill_price, commission) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record["ts"],
                    record["order_id"],
                    record["symbol"],
                    record["quantity"],
                    record["fill_price"],
                    record["commission"],
                ),
            )
            self._conn.commit()

    def record_outcome(self, outcome: OutcomeRecord) -> None:
        record = {
            "kind": "outcome",
            "ts": outcome.timestamp.isoformat(),
            "symbol": outcome.symbol,
            "outcome": outcome.outcome.value,
            "close": str(outcome.close),
            "pnl": str(outcome.pnl),
        }
        self._write_jsonl(record)
        if self._conn:
            self._conn.execute(
                "INSERT INTO outcomes (ts, symbol, outcome, close, pnl) VALUES (?, ?, ?, ?, ?)",
                (record["ts"], record["symbol"], record["outcome"], record["close"], record["pnl"]),
            )
            self._conn.commit()
