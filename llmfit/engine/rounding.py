"""Half-up rounding for values shown to users."""

import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator does: 2.25 -> 2.3, 12.5 -> 13 (``round`` gives 12)."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
