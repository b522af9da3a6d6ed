"""
domain/units.py
===============
Tolerant numeric coercion shared by every calculator.

Inputs arrive from form fields and stored JSON, so numbers may be strings with
a German decimal comma ("1,5"), blank, None or garbage. Nothing in here raises.
"""
from __future__ import annotations

import math
from typing import Any, Optional


def parse_number(value: Any) -> Optional[float]:
    """Parse ``value`` into a finite float, or return None.

    Accepts ints, floats and strings using either ``.`` or ``,`` as decimal
    separator (whitespace is ignored). Booleans are not treated as numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = "".join(value.split()).replace(",", ".", 1)
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    return number if math.isfinite(number) else None


def non_negative(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite number floored at 0; ``default`` when unparseable."""
    number = parse_number(value)
    if number is None:
        return default
    return max(0.0, number)


def positive_or_none(value: Any) -> Optional[float]:
    """Return the parsed value when it is strictly positive, else None."""
    number = parse_number(value)
    return number if number is not None and number > 0 else None


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def w_to_kw(watts: float) -> float:
    return watts / 1000.0


def round2(value: float) -> float:
    """Round half away from zero to 2 decimals (table presets)."""
    scaled = value * 100.0
    return math.floor(scaled + 0.5) / 100.0 if scaled >= 0 else -math.floor(-scaled + 0.5) / 100.0
