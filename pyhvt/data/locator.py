"""Resolve a trading date to the file holding that day's bars."""

from dataclasses import dataclass
from datetime import date
from pathlib import Path

DEFAULT_PATTERN = "allstocks_{date:%Y%m%d}/table_{symbol}.csv"


@dataclass(frozen=True)
class DailyFileLocator:
    """One file per trading day under ``root``.

    ``pattern`` is a ``str.format`` template receiving ``date`` and
    ``symbol`` (lower-cased).
    """

    root: Path
    symbol: str
    pattern: str = DEFAULT_PATTERN

    def resolve(self, day: date) -> Path:
        return Path(self.root) / self.pattern.format(date=day, symbol=self.symbol.lower())

    def __call__(self, day: date) -> Path:
        return self.resolve(day)


__all__ = ["DailyFileLocator", "DEFAULT_PATTERN"]
