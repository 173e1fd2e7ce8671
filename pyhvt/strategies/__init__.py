"""
HVT pattern detection and position management.
"""

from .position import ExitRules, Position, PositionManager
from .signals import DEFAULT_RULES, HVTRules, detect_hvt
from .window import SlidingWindow

__all__ = [
    "SlidingWindow",
    "HVTRules",
    "DEFAULT_RULES",
    "detect_hvt",
    "ExitRules",
    "Position",
    "PositionManager",
]
