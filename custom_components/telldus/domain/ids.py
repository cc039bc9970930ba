"""Identifiers for cached devices and sensors."""

from __future__ import annotations

import math
from typing import Any


def _number_key(number: float) -> str:
    """Return the canonical text of a finite number."""

    if number.is_integer():
        return str(int(number))
    return repr(number)


def normalize_item_id(value: Any) -> str:
    """Return the canonical string form of a device or sensor id.

    Ids reach the client as numbers from the API and as strings from callers.
    Numeric text is compared by value, so ``5``, ``5.0``, ``"05"``, ``"5"``
    and ``" 5 "`` all normalise to ``"5"`` and ``"7.50"`` matches ``7.5``.
    Returns an empty string for ``None`` and blank values.
    """

    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _number_key(value) if math.isfinite(value) else str(value)
    normalized = str(value).strip()
    digits = normalized[1:] if normalized[:1] in ("+", "-") else normalized
    if digits.isdecimal():
        return str(int(normalized))
    if "_" in normalized:
        return normalized
    try:
        number = float(normalized)
    except ValueError:
        return normalized
    if not math.isfinite(number):
        return normalized
    return _number_key(number)


def ids_match(left: Any, right: Any) -> bool:
    """Return ``True`` when two ids refer to the same item."""

    left_id = normalize_item_id(left)
    return bool(left_id) and left_id == normalize_item_id(right)
