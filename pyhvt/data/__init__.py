"""
Bar parsing, sourcing, filtering and feed implementations.
"""

from .daily_files import DailyFileBarFeed, load_bars_from_file
from .feeds import BarStreamFeed, InMemoryBarFeed
from .filters import MarketHours, is_within_market_hours, parse_clock
from .locator import DailyFileLocator
from .parser import parse_line, parse_timestamp, try_parse_line

__all__ = [
    "BarStreamFeed",
    "InMemoryBarFeed",
    "DailyFileBarFeed",
    "DailyFileLocator",
    "MarketHours",
    "is_within_market_hours",
    "parse_clock",
    "parse_line",
    "parse_timestamp",
    "try_parse_line",
    "load_bars_from_file",
]
