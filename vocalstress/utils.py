"""
VocalStress v1 Utilities - Shared helper functions.

Responsibilities:
- Deterministic JSON serialization
- Half-up rounding for reported numbers
- Score clamping

Invariants:
- Reported numbers round ties upward (2.5 → 3, -2.5 → -2), not to even
"""

import json
import math
from typing import Any, Mapping


def serialize_json(data: Mapping[str, Any]) -> str:
    """
    Serialize dictionary to JSON deterministically.

    Args:
        data: Dictionary to serialize.

    Returns:
        JSON string with sorted keys, 2-space indent, trailing newline.
    """
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with ties toward +infinity (floor(x * 10^d + 0.5) / 10^d).

    Returns:
        Rounded float; 0.0 for non-finite input.
    """
    if not math.isfinite(value):
        return 0.0
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def round_int(value: float) -> int:
    """Half-up rounding to int."""
    return int(round_half_up(value))


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to [low, high]; NaN maps to low."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))
