"""Rounding and clamping helpers shared by every calculation stage."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    return max(low, min(high, value))
