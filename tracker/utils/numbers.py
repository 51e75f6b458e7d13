"""
Numeric normalization for values exported by the game client.

Spreadsheets mix plain integers, floats and human-formatted strings such as
"1.5k", "2,300,000" or "3.1B". Everything is reduced to a non-negative int.
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

SUFFIX_MULTIPLIERS = {
    'k': 1_000,
    'm': 1_000_000,
    'b': 1_000_000_000,
}

_NON_NUMERIC_RE = re.compile(r'[^\d.]')

# Far above any in-game stat; keeps per-kingdom sums inside a 64-bit INTEGER
MAX_VALUE = 10 ** 15


def parse_number(value: Any) -> int:
    """
    Parse a raw cell value into a non-negative integer.

    Args:
        value: Cell content (int, float, str or None)

    Returns:
        Floored integer value, 0 for empty, malformed or out-of-range input

    Examples:
        "1.5k" -> 1500
        "2m" -> 2000000
        "12,345" -> 12345
        "abc" -> 0
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return _bounded(math.floor(value))

    text = str(value).lower().strip()
    if not text:
        return 0

    multiplier = SUFFIX_MULTIPLIERS.get(text[-1], 1)

    magnitude = _NON_NUMERIC_RE.sub('', text)
    # Only the first decimal point counts: "1.2.3" reads as 1.2
    head, dot, tail = magnitude.partition('.')
    magnitude = head + dot + tail.split('.', 1)[0]

    try:
        number = Decimal(magnitude)
    except InvalidOperation:
        return 0

    # Decimal keeps "2.3m" at exactly 2300000
    return _bounded(int(number * multiplier))


def _bounded(number: int) -> int:
    if number < 0:
        return 0
    return number if number <= MAX_VALUE else 0


def parse_float(value: Any) -> float:
    """Parse a multiplier cell or form value; raises ValueError when not numeric."""
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    number = float(str(value).strip()) if isinstance(value, str) else float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number
