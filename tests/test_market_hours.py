from datetime import datetime, time

import pytest

from pyhvt.data.filters import MarketHours, is_within_market_hours, parse_clock


@pytest.mark.parametrize(
    "hour, minute, expected",
    [
        (9, 30, False),
        (9, 59, False),
        (10, 0, True),
        (12, 45, True),
        (15, 0, True),
        (15, 30, True),
        (15, 31, False),
        (15, 59, False),
        (16, 0, False),
        (16, 5, False),
        (18, 10, False),
    ],
)
def test_default_window(hour: int, minute: int, expected: bool) -> None:
    assert is_within_market_hours(datetime(2017, 1, 3, hour, minute)) is expected
    assert MarketHours()(datetime(2017, 1, 3, hour, minute)) is expected


def test_custom_window() -> None:
    hours = MarketHours(open=time(9, 30), last=time(16, 0))
    assert hours(datetime(2017, 1, 3, 9, 30))
    assert hours(datetime(2017, 1, 3, 16, 0))
    assert not hours(datetime(2017, 1, 3, 16, 1))


def test_invalid_window() -> None:
    with pytest.raises(ValueError):
        MarketHours(open=time(15, 0), last=time(10, 0))


def test_parse_clock() -> None:
    assert parse_clock("09:45") == time(9, 45)
    with pytest.raises(ValueError):
        parse_clock("9h45")
