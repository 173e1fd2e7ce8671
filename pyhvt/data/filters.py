"""Market-hours filter applied before bars reach strategies."""

from dataclasses import dataclass
from datetime import datetime, time


@dataclass(frozen=True)
class MarketHours:
    """Regular-session window, both ends inclusive, at minute resolution.

    Defaults keep the first half hour after the open and the last half hour
    before the close out of the pattern window: [10:00, 15:30].
    """

    open: time = time(10, 0)
    last: time = time(15, 30)

    def __post_init__(self) -> None:
        if self.last < self.open:
            raise ValueError("market hours 'last' must not precede 'open'")

    def __call__(self, timestamp: datetime) -> bool:
        return is_within_market_hours(timestamp, self)


def is_within_market_hours(timestamp: datetime, hours: MarketHours = MarketHours()) -> bool:
    minute_of_day = (timestamp.hour, timestamp.minute)
    return (hours.open.hour, hours.open.minute) <= minute_of_day <= (hours.last.hour, hours.last.minute)


def parse_clock(value: str) -> time:
    """Parse ``HH:MM`` into a :class:`datetime.time`."""
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError as exc:
        raise ValueError(f"Invalid clock time: {value!r}") from exc


__all__ = ["MarketHours", "is_within_market_hours", "parse_clock"]
