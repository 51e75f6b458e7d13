import math

import pytest

from tracker.utils.numbers import MAX_VALUE, parse_float, parse_number


@pytest.mark.parametrize("raw, expected", [
    ("1.5k", 1500),
    ("2m", 2000000),
    ("2.3m", 2300000),
    ("3.1B", 3100000000),
    ("0", 0),
    ("", 0),
    ("   ", 0),
    ("abc", 0),
    ("12,345", 12345),
    ("1 234 567", 1234567),
    (" 42 ", 42),
    ("99.9", 99),
    ("1.2.3", 1),
])
def test_parse_number_strings(raw, expected):
    assert parse_number(raw) == expected


def test_parse_number_native_values():
    assert parse_number(None) == 0
    assert parse_number(1234) == 1234
    assert parse_number(1234.9) == 1234
    assert parse_number(-50) == 0
    assert parse_number(float('nan')) == 0
    assert parse_number(math.inf) == 0
    assert parse_number(True) == 0


def test_parse_number_ignores_sign_in_text():
    # Non-digit characters are stripped, so the minus sign disappears
    assert parse_number("-5k") == 5000


def test_parse_number_out_of_range_reads_as_zero():
    assert parse_number("99999999999b") == 0
    assert parse_number(2 ** 64) == 0
    assert parse_number(1e300) == 0
    assert parse_number(MAX_VALUE) == MAX_VALUE
    assert parse_number("1000000b") == MAX_VALUE


def test_parse_float():
    assert parse_float("1.5") == 1.5
    assert parse_float(" 0.01 ") == 0.01
    assert parse_float(2) == 2.0
    for bad in ("abc", "", True, "inf"):
        with pytest.raises(ValueError):
            parse_float(bad)
