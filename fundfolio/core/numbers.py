"""Locale-aware number parsing for spreadsheet and user input.

Spreadsheet exports mix European (``1.234,56``) and US (``1,234.56``)
formatting. The separator that appears last is taken as the decimal
point; the other one is a thousands separator.
"""

from __future__ import annotations

import math
import re

# Everything except digits, separators and the minus sign
_NON_NUMERIC = re.compile(r"[^\d.,-]")

# Longest leading decimal number, e.g. "12.5" in "12.5.3" or "-3" in "-3-"
_LEADING_NUMBER = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_locale_number(text: object) -> float:
    """Parse a free-text number in either European or US format.

    Args:
        text: Raw value, e.g. ``"1.234,56 €"``, ``"$1,234.56"`` or ``"12"``

    Returns:
        Parsed value, or 0.0 if nothing numeric could be read

    Examples:
        >>> parse_locale_number("1.234,56")
        1234.56
        >>> parse_locale_number("1,234.56")
        1234.56
        >>> parse_locale_number("abc")
        0.0
    """
    if isinstance(text, bool) or text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) else 0.0

    cleaned = _NON_NUMERIC.sub("", str(text))
    if not cleaned:
        return 0.0

    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")

    if last_comma > last_dot:
        # European: dots group thousands, comma is the decimal point
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return 0.0
    return float(match.group(0))
