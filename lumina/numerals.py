"""
Conversions between display numerals and floats.
"""
import math
import re
from decimal import Decimal
from typing import Optional

from .config import ERROR_TEXT

_NUMERAL_PATTERN = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

# Magnitudes outside this range are written in exponent form
_POSITIONAL_MIN = Decimal("1e-7")
_POSITIONAL_MAX = Decimal("1e21")


def parse_numeral(text: str) -> Optional[float]:
    """
    Parse a display numeral.

    Accepts an optional leading minus, digits with at most one decimal point
    (a trailing point is allowed) and an optional exponent.

    Args:
        text: Numeral string

    Returns:
        The finite float value, or None if the text is not a finite numeral
    """
    if not _NUMERAL_PATTERN.match(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    """
    Write a float back as a display numeral.

    Uses the shortest digits that round-trip, integers without a fractional
    part, and exponent form only for very large or very small magnitudes.
    Negative zero becomes "0" and non-finite values become the error text.
    """
    if not math.isfinite(value):
        return ERROR_TEXT
    if value == 0:
        return "0"

    exact = Decimal(repr(value))
    if _POSITIONAL_MIN <= abs(exact) < _POSITIONAL_MAX:
        text = format(exact, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    return format(exact.normalize(), "e")


def round_significant(value: float, digits: int) -> float:
    """Round to the given number of significant digits."""
    if not math.isfinite(value) or value == 0:
        return value
    return float(f"{value:.{digits - 1}e}")
