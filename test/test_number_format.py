from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from jsstringify._errors import UnserializableValueStringifyError
from jsstringify.constants import MAX_SAFE_INTEGER
from jsstringify.number_format import format_number, number_to_json, shortest_digits


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (0.0, "0"),
        (-0.0, "0"),
        (1, "1"),
        (-1, "-1"),
        (100.0, "100"),
        (0.1, "0.1"),
        (-1.5, "-1.5"),
        (123.456, "123.456"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (1.5e-7, "1.5e-7"),
        (123e-20, "1.23e-18"),
        (1e20, "100000000000000000000"),
        (1e21, "1e+21"),
        (1.2e21, "1.2e+21"),
        (2**53, "9007199254740992"),
        (2**53 + 1, "9007199254740992"),
        (MAX_SAFE_INTEGER, "9007199254740991"),
        (-MAX_SAFE_INTEGER, "-9007199254740991"),
        (10**21, "1e+21"),
        (5e-324, "5e-324"),
        (1.7976931348623157e308, "1.7976931348623157e+308"),
        (float("nan"), "NaN"),
        (float("inf"), "Infinity"),
        (float("-inf"), "-Infinity"),
    ],
)
def test_format_number(value: int | float, expected: str) -> None:
    assert format_number(value) == expected


def test_format_number__int_too_large() -> None:
    with pytest.raises(OverflowError):
        format_number(10**400)


@given(value=st.floats(allow_nan=False, allow_infinity=False))
def test_format_number__round_trips(value: float) -> None:
    text = format_number(value)

    assert float(text) == value
    assert "e" not in text or text.count("e") == 1
    if value.is_integer() and abs(value) < 1e21:
        assert "." not in text and "e" not in text


@given(value=st.floats(min_value=5e-324, allow_infinity=False))
def test_shortest_digits(value: float) -> None:
    digits, n = shortest_digits(value)

    assert float(f"0.{digits}e{n}") == value
    assert digits == digits.strip("0")
    assert len(digits) <= len(repr(value))


def test_number_to_json() -> None:
    assert number_to_json(1) == "1"
    assert number_to_json(0.5) == "0.5"
    assert number_to_json(math.nan) == "null"
    assert number_to_json(-math.inf) == "null"

    with pytest.raises(UnserializableValueStringifyError) as exc_info:
        number_to_json(10**400)
    assert exc_info.value.value == 10**400
