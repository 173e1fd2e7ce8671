"""
Trading venues.
"""

from .simulated import SimulatedVenue

__all__ = ["SimulatedVenue"]
