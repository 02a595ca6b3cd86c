"""Unit conversion and plausibility checks for raw sensor values."""

from __future__ import annotations

import math
from typing import Any


PLAUSIBLE_MIN_C = -50.0
PLAUSIBLE_MAX_C = 150.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def plausible(value: Any) -> float | None:
    """Return ``value`` as a float when it is a finite reading inside the open plausible range."""
    if not _is_number(value):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    if not (PLAUSIBLE_MIN_C < value < PLAUSIBLE_MAX_C):
        return None
    return value


def parse_celsius(text: str | None) -> float | None:
    if text is None:
        return None
    try:
        value = float(str(text).strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_int(text: int | str | None) -> int | None:
    if text is None or isinstance(text, bool):
        return None
    try:
        return int(str(text).strip())
    except ValueError:
        return None


def milli_celsius_to_celsius(raw: int | str | None) -> float | None:
    milli = parse_int(raw)
    if milli is None:
        return None
    return milli / 1000.0


def deci_kelvin_to_celsius(raw: int | str | None) -> float | None:
    """Convert tenths of Kelvin to Celsius rounded to one decimal.

    Non-positive raw values and results outside the plausible range yield ``None``.
    """
    deci = parse_int(raw)
    if deci is None or deci <= 0:
        return None
    celsius = plausible(deci / 10 - 273.15)
    if celsius is None:
        return None
    return round(celsius, 1)
