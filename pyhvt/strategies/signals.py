"""High-Volume-Turn (HVT) pattern detection.

Over four consecutive bars ``b1..b4`` (oldest first) the pattern needs:

* volume accelerating: each of ``b2``, ``b3`` trades more than
  ``volume_ratio`` times the previous bar's volume;
* a decline on red bars: ``b1..b3`` all close below their open, with
  strictly falling closes;
* a reversal: ``b4`` closes above its open by more than ``min_body`` and
  above ``b3``'s close.

Every comparison is strict.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from pyhvt.core.models import Bar


@dataclass(frozen=True)
class HVTRules:
    volume_ratio: Decimal = Decimal("1.4")
    min_body: Decimal = Decimal("0.10")

    def __post_init__(self) -> None:
        if self.volume_ratio <= 0:
            raise ValueError("volume_ratio must be positive")
        if self.min_body < 0:
            raise ValueError("min_body must not be negative")


DEFAULT_RULES = HVTRules()


def is_volume_accelerating(b1: Bar, b2: Bar, b3: Bar, rules: HVTRules = DEFAULT_RULES) -> bool:
    return b2.volume > b1.volume * rules.volume_ratio and b3.volume > b2.volume * rules.volume_ratio


def is_price_declining(b1: Bar, b2: Bar, b3: Bar) -> bool:
    if not (b1.is_bearish and b2.is_bearish and b3.is_bearish):
        return False
    return b2.close < b1.close and b3.close < b2.close


def is_reversal_bar(b3: Bar, b4: Bar, rules: HVTRules = DEFAULT_RULES) -> bool:
    return b4.is_bullish and b4.body > rules.min_body and b4.close > b3.close


def detect_hvt(window: Sequence[Bar], rules: HVTRules = DEFAULT_RULES) -> bool:
    """True when the four bars in ``window`` form the HVT pattern."""
    if len(window) != 4:
        raise ValueError(f"HVT detection needs exactly 4 bars, got {len(window)}")
    b1, b2, b3, b4 = window
    return (
        is_price_declining(b1, b2, b3)
        and is_volume_accelerating(b1, b2, b3, rules)
        and is_reversal_bar(b3, b4, rules)
    )


__all__ = [
    "HVTRules",
    "DEFAULT_RULES",
    "detect_hvt",
    "is_volume_accelerating",
    "is_price_declining",
    "is_reversal_bar",
]
