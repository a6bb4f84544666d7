# PixelChain - Dimensions
"""
Parsing of the dimension strings used in filter parameter strings.

A dimension is either a plain (possibly negative) integer, an integer with a
``px`` suffix or a percentage of a reference length, e.g. ``"12"``,
``"12px"``, ``"-20"`` or ``"50%"``.
"""

from __future__ import annotations

import re

_LEADING_NUMBER = re.compile(r"^\s*([+-]?\d+(?:\.\d*)?)")


def _leading_int(text: str) -> int | None:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    return int(float(match.group(1)))


def parse_dimension(value: str | int | float | None, base: int | float | None = None) -> int | None:
    """
    Converts a dimension into pixels.

    :param value: The dimension, e.g. ``"50%"``, ``"12px"`` or ``12``
    :param base: Reference length percentages refer to
    :return: The length in pixels or None if ``value`` is empty
    :raises ValueError: If the value can not be interpreted, or is a
        percentage and no reference length is given
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = value.strip().lower()
    if not text:
        return None
    if text.endswith("%"):
        if not base:
            raise ValueError(f"Percentage dimension {value!r} requires a reference length")
        number = _leading_int(text)
        if number is None:
            raise ValueError(f"Invalid dimension: {value!r}")
        return int(round(round(base) * number / 100))
    if text.endswith("px"):
        number = _leading_int(text)
        if number is None:
            raise ValueError(f"Invalid dimension: {value!r}")
        return number
    number = _leading_int(text)
    if number is None:
        raise ValueError(f"Invalid dimension: {value!r}")
    return number


def parse_font_size(value: str | int | float | None, default: int = 12) -> int:
    """
    Converts a font size into pixels. ``pt`` values are scaled by 72/96,
    ``px`` and unit-less values are taken as they are.

    :param value: The font size, e.g. ``"16px"``, ``"12pt"`` or ``14``
    :param default: Returned if ``value`` is empty
    :return: The font size in pixels
    :raises ValueError: If the value is not numeric
    """
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return int(value)
    text = value.strip().lower()
    if not text:
        return default
    is_points = text.endswith("pt")
    text = text.removesuffix("pt").removesuffix("px").strip()
    try:
        size = float(text)
    except ValueError as e:
        raise ValueError(f"Invalid font size: {value!r}") from e
    if is_points:
        return int(size * 72 / 96)
    return int(size)


def parse_pair(value: str | None, separator: str = ",") -> list[str]:
    """Splits ``"a,b"`` into its trimmed parts, empty parts are kept."""
    if value is None:
        return []
    return [part.strip() for part in value.split(separator)]


__all__ = ["parse_dimension", "parse_font_size", "parse_pair"]
