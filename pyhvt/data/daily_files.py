"""Feed reading one raw minute-bar file per trading day."""

import logging
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from pyhvt.core.models import Bar
from pyhvt.data.feeds import BarStreamFeed
from pyhvt.data.locator import DailyFileLocator
from pyhvt.data.parser import try_parse_line

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def load_bars_from_file(path: Path, symbol: str, *, delimiter: str = ",") -> Tuple[List[Bar], int]:
    """Parse every record of ``path``; returns the bars and the number of skipped lines."""
    bars: List[Bar] = []
    skipped = 0
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            bar = try_parse_line(line, symbol, delimiter)
            if bar is None:
                skipped += 1
                continue
            bars.append(bar)
    return bars, skipped


class DailyFileBarFeed(BarStreamFeed):
    """
    Walks calendar days from ``start`` to ``end`` (inclusive), reading the
    file the locator resolves for each day. Days without a file (weekends,
    holidays, gaps) are skipped; malformed lines are dropped and counted.
    """

    def __init__(
        self,
        locator: DailyFileLocator,
        start: DateLike,
        end: DateLike,
        *,
        delimiter: str = ",",
    ) -> None:
        super().__init__()
        self.locator = locator
        self.symbol = locator.symbol
        self.start = _as_date(start)
        self.end = _as_date(end)
        if self.end < self.start:
            raise ValueError("end must not precede start")
        self.delimiter = delimiter
        self.days_loaded = 0
        self.days_missing = 0
        self.lines_skipped = 0

    def prime(self) -> None:
        self.days_loaded = 0
        self.days_missing = 0
        self.lines_skipped = 0
        super().prime()

    def _iter_days(self) -> Iterator[date]:
        for offset in range((self.end - self.start).days + 1):
            yield self.start + timedelta(days=offset)

    def _iter_bars(self) -> Iterator[Bar]:
        for day in self._iter_days():
            path = self.locator.resolve(day)
            if not path.is_file():
                self.days_missing += 1
                logger.debug("No data for %s at %s", day.isoformat(), path)
                continue
            bars, skipped = load_bars_from_file(path, self.symbol, delimiter=self.delimiter)
            self.days_loaded += 1
            self.lines_skipped += skipped
            logger.debug("Loaded %d bars for %s (%d skipped)", len(bars), day.isoformat(), skipped)
            yield from bars

    def on_stop(self) -> None:
        logger.info(
            "%s feed: %d days loaded, %d days missing, %d lines skipped",
            self.symbol,
            self.days_loaded,
            self.days_missing,
            self.lines_skipped,
        )
