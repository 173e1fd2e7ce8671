from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass
class RunStatistics:
    """
    Running tally of realized trade results for one run.

    ``largest_loss`` starts at zero and only ever moves down.
    """

    largest_loss: Decimal = Decimal("0")
    largest_loss_timestamp: Optional[datetime] = None
    wins: int = 0
    losses: int = 0
    forced_exits: int = 0
    realized_pnl: Decimal = Decimal("0")

    def record_loss(self, pnl: Decimal, timestamp: datetime) -> bool:
        """Count a stop-loss exit; returns True when it sets a new largest loss."""
        self.losses += 1
        self.realized_pnl += pnl
        if pnl < self.largest_loss:
            self.largest_loss = pnl
            self.largest_loss_timestamp = timestamp
            return True
        return False

    def record_win(self, pnl: Decimal) -> None:
        self.wins += 1
        self.realized_pnl += pnl

    def record_forced_exit(self, pnl: Decimal) -> None:
        self.forced_exits += 1
        self.realized_pnl += pnl

    def as_dict(self) -> Dict[str, Any]:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "forced_exits": self.forced_exits,
            "realized_pnl": self.realized_pnl,
            "largest_loss": self.largest_loss,
            "largest_loss_timestamp": self.largest_loss_timestamp,
        }
