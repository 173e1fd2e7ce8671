from collections import deque
from typing import Deque, Tuple

from pyhvt.core.models import Bar

HVT_WINDOW = 4


class SlidingWindow:
    """Last ``size`` bars in arrival order, oldest first.

    Bars are trusted to arrive in time order; nothing is reordered or
    deduplicated.
    """

    def __init__(self, size: int = HVT_WINDOW) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self.size = size
        self._bars: Deque[Bar] = deque(maxlen=size)

    def push(self, bar: Bar) -> None:
        self._bars.append(bar)

    def snapshot(self) -> Tuple[Bar, ...]:
        return tuple(self._bars)

    @property
    def is_full(self) -> bool:
        return len(self._bars) == self.size

    def clear(self) -> None:
        self._bars.clear()

    def __len__(self) -> int:
        return len(self._bars)

    def __repr__(self) -> str:
        stamps = ", ".join(bar.timestamp.strftime("%Y-%m-%d %H:%M") for bar in self._bars)
        return f"SlidingWindow(size={self.size}, bars=[{stamps}])"
