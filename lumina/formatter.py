"""
Display formatting for calculator numerals.
"""
import re

from .config import (
    ERROR_TEXT, EXPONENT_UPPER_BOUND, EXPONENT_LOWER_BOUND,
    EXPONENT_FRACTION_DIGITS,
)
from .numerals import parse_numeral

# Matches the gaps between thousands groups in a run of digits
_THOUSANDS_GAP = re.compile(r"\B(?=(\d{3})+(?!\d))")


def to_exponential(value: float, fraction_digits: int = EXPONENT_FRACTION_DIGITS) -> str:
    """
    Exponential notation with a fixed number of mantissa fraction digits.

    The exponent carries an explicit sign and no zero padding, e.g. 5.0000e-8.
    """
    mantissa, exponent = f"{value:.{fraction_digits}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def group_thousands(integer_part: str) -> str:
    """Insert a comma every three digits from the right, leaving a sign alone."""
    return _THOUSANDS_GAP.sub(",", integer_part)


def render(value: str) -> str:
    """
    Render a display numeral for presentation.

    Args:
        value: Raw display string from the engine

    Returns:
        "Error" for anything that is not a finite numeral, exponential
        notation for very large or very small magnitudes, otherwise the
        numeral with thousands separators
    """
    if value == ERROR_TEXT:
        return ERROR_TEXT
    number = parse_numeral(value)
    if number is None:
        return ERROR_TEXT

    magnitude = abs(number)
    if magnitude > EXPONENT_UPPER_BOUND or (magnitude < EXPONENT_LOWER_BOUND and number != 0):
        return to_exponential(number)

    integer_part, point, fraction = value.partition(".")
    return group_thousands(integer_part) + point + fraction
