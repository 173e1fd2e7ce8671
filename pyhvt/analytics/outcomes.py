from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from pyhvt.core.enums import Outcome
from pyhvt.core.events import MetricsEvent
from pyhvt.core.interfaces import PerformanceReporter
from pyhvt.core.models import OutcomeRecord

OUTCOME_COLUMNS = ["timestamp", "symbol", "outcome", "close", "pnl"]


class OutcomeBook(PerformanceReporter):
    """
    Collects realized win/loss records and reports a running summary.

    A :class:`MetricsEvent` is emitted after each engine cycle that added
    records.
    """

    def __init__(self) -> None:
        super().__init__()
        self.records: List[OutcomeRecord] = []
        self._reported = 0

    def on_start(self) -> None:
        self.records.clear()
        self._reported = 0

    def record_outcome(self, record: OutcomeRecord) -> None:
        self.records.append(record)

    def summary(self) -> Dict[str, Any]:
        wins = [r for r in self.records if r.outcome == Outcome.WON]
        losses = [r for r in self.records if r.outcome == Outcome.LOSS]
        total = len(self.records)
        largest_loss: Optional[Decimal] = min((r.pnl for r in losses), default=None)
        return {
            "trades": total,
            "wins": len(wins),
            "losses": len(losses),
            "win_rate": len(wins) / total if total else 0.0,
            "realized_pnl": sum((r.pnl for r in self.records), Decimal("0")),
            "largest_loss": largest_loss,
        }

    def emit_metrics(self) -> List[MetricsEvent]:
        if len(self.records) == self._reported:
            return []
        self._reported = len(self.records)
        return [MetricsEvent(timestamp=self.records[-1].timestamp, payload=self.summary())]

    def to_frame(self) -> pd.DataFrame:
        """Records as a DataFrame indexed by timestamp."""
        rows = [
            {
                "timestamp": r.timestamp,
                "symbol": r.symbol,
                "outcome": r.outcome.value,
                "close": r.close,
                "pnl": r.pnl,
            }
            for r in self.records
        ]
        frame = pd.DataFrame(rows, columns=OUTCOME_COLUMNS)
        return frame.set_index("timestamp")
