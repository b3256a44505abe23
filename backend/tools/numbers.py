"""
Numeric helpers shared by the extractors and the scorers.

Scores are rounded half-up (0.5 → 1) rather than with Python's banker's
rounding so that boundary scores such as 12.5 land on the same integer the
analyst-facing reports show.
"""

import math
from typing import Optional

# Multiplier words that may follow a number ("2.5 million", "1.2B")
MULTIPLIERS: dict[str, float] = {
    "million": 1_000_000,
    "m": 1_000_000,
    "billion": 1_000_000_000,
    "b": 1_000_000_000,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def parse_number(raw: str, multiplier: Optional[str] = None) -> Optional[float]:
    """Parse "1,200.5" (+ optional multiplier word) into a float.

    Returns None when the matched text holds no usable number, so callers
    can fall through to the next pattern.
    """
    cleaned = raw.replace(",", "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    if multiplier:
        value *= MULTIPLIERS.get(multiplier.lower(), 1)
    return value
