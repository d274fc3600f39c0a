"""Rounding and clamping helpers shared by every pipeline stage.

Integer results round half up (2.5 -> 3), never to even, so that banding at
.5 boundaries is stable across platforms and matches the reference scores.
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Clamp to [0, 100] and round to an integer score."""
    return round_half_up(clamp(value, 0, 100))


def round_to(value: float, ndigits: int = 1) -> float:
    """Half-up rounding to a fixed number of decimals."""
    factor = 10 ** ndigits
    return round_half_up(value * factor) / factor
