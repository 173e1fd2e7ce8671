"""Raw minute-bar record parser.

Records are delimiter-separated in a fixed order::

    date | time | open | high | low | close | volume | splits | earnings | dividends

``date`` is ``YYYYMMDD``; ``time`` is ``HMM`` or ``HHMM``. Fields after
volume are ignored.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from pyhvt.core.models import Bar
from pyhvt.errors import ParseError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d %H:%M"
MIN_FIELDS = 7
PRICE_FIELDS = ("open", "high", "low", "close", "volume")

_DATE_RE = re.compile(r"^\d{8}$")
_TIME_RE = re.compile(r"^\d{3,4}$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _split_time(raw: str) -> tuple[str, str]:
    if not _TIME_RE.match(raw):
        raise ParseError(f"Invalid time field: {raw!r}")
    if len(raw) == 3:
        return "0" + raw[0], raw[1:3]
    return raw[0:2], raw[2:4]


def parse_timestamp(date_field: str, time_field: str) -> datetime:
    """Combine the ``YYYYMMDD`` date and ``HMM``/``HHMM`` time fields."""
    date_field = date_field.strip()
    if not _DATE_RE.match(date_field):
        raise ParseError(f"Invalid date field: {date_field!r}")
    hour, minute = _split_time(time_field.strip())
    try:
        return datetime.strptime(f"{date_field} {hour}:{minute}", TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise ParseError(f"Invalid timestamp {date_field} {hour}:{minute}") from exc


def _parse_decimal(name: str, raw: str) -> Decimal:
    raw = raw.strip()
    # Decimal() alone also takes "1_000", "NaN" and "Infinity"
    if not _DECIMAL_RE.match(raw):
        raise ParseError(f"Field '{name}' is not a decimal: {raw!r}")
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ParseError(f"Field '{name}' is not a decimal: {raw!r}") from exc
    if value < 0:
        raise ParseError(f"Field '{name}' must be non-negative: {raw!r}")
    return value


def parse_line(line: Optional[str], symbol: str, delimiter: str = ",") -> Bar:
    """Parse one raw record into a :class:`Bar`.

    Raises :class:`ParseError` for empty input, missing fields, non-decimal
    prices/volume or an impossible date/time.
    """
    if line is None or not line.strip():
        raise ParseError("Empty record", line)

    fields = line.strip().split(delimiter)
    if len(fields) < MIN_FIELDS:
        raise ParseError(f"Expected at least {MIN_FIELDS} fields, got {len(fields)}", line)

    try:
        timestamp = parse_timestamp(fields[0], fields[1])
        values = {name: _parse_decimal(name, raw) for name, raw in zip(PRICE_FIELDS, fields[2:MIN_FIELDS])}
    except ParseError as exc:
        raise ParseError(str(exc), line) from exc

    return Bar(symbol=symbol, timestamp=timestamp, **values)


def try_parse_line(line: Optional[str], symbol: str, delimiter: str = ",") -> Optional[Bar]:
    """Like :func:`parse_line` but returns None for malformed records."""
    try:
        return parse_line(line, symbol, delimiter)
    except ParseError as exc:
        logger.debug("Skipping record %r: %s", line, exc)
        return None


__all__ = ["parse_line", "try_parse_line", "parse_timestamp", "TIMESTAMP_FORMAT"]
