"""Format JavaScript numbers as text, as `Number.prototype.toString()` does."""

from __future__ import annotations

import math

from jsstringify._errors import UnserializableValueStringifyError
from jsstringify.constants import MAX_SAFE_INTEGER


def shortest_digits(value: float) -> tuple[str, int]:
    """Get the shortest decimal digits that round-trip to a positive float.

    Returns `(digits, n)` such that `value == float(f"0.{digits}e{n}")`, with
    no leading or trailing zeros in `digits`. These are the `s`, `k` and `n`
    of ECMAScript's [Number::toString] (`k == len(digits)`).

    CPython's `repr()` of a float is already the shortest correctly-rounded
    round-trip representation, so the digits are taken from it.

    >>> shortest_digits(123.45)
    ('12345', 3)
    >>> shortest_digits(0.001)
    ('1', -2)
    >>> shortest_digits(1e21)
    ('1', 22)

    [Number::toString]: https://tc39.es/ecma262/#sec-numeric-types-number-tostring
    """
    mantissa, _, exponent_text = repr(value).partition("e")
    int_part, _, fraction = mantissa.partition(".")
    digits = int_part + fraction
    point = len(int_part) + (int(exponent_text) if exponent_text else 0)

    significant = digits.lstrip("0")
    point -= len(digits) - len(significant)
    return significant.rstrip("0"), point


def format_number(value: int | float) -> str:
    """Format a number the way JavaScript converts Numbers to strings.

    `int` values are JavaScript numbers too, so they behave as the float they
    convert to: integers larger than `Number.MAX_SAFE_INTEGER` lose precision,
    and very large ones use exponent notation.

    >>> format_number(1.0)
    '1'
    >>> format_number(-0.0)
    '0'
    >>> format_number(1.5e-7)
    '1.5e-7'
    >>> format_number(1e21)
    '1e+21'
    >>> format_number(123456789012345678901234567890)
    '1.2345678901234568e+29'
    >>> format_number(float("nan"))
    'NaN'

    Raises
    ------
    OverflowError
        If value is an `int` that is too large to be a JavaScript number.
    """
    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return int.__str__(value)
        value = float(value)
    else:
        value = float(value)

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    digits, n = shortest_digits(abs(value))
    k = len(digits)

    if k <= n <= 21:
        return f"{sign}{digits}{'0' * (n - k)}"
    if 0 < n <= 21:
        return f"{sign}{digits[:n]}.{digits[n:]}"
    if -6 < n <= 0:
        return f"{sign}0.{'0' * -n}{digits}"

    exponent = n - 1
    exponent_sign = "+" if exponent >= 0 else "-"
    if k == 1:
        return f"{sign}{digits}e{exponent_sign}{abs(exponent)}"
    return f"{sign}{digits[0]}.{digits[1:]}e{exponent_sign}{abs(exponent)}"


def number_to_json(value: int | float) -> str:
    """Format a number as JSON text.

    Non-finite numbers are written as `null`, as JavaScript does.

    >>> number_to_json(2.5)
    '2.5'
    >>> number_to_json(float("inf"))
    'null'

    Raises
    ------
    UnserializableValueStringifyError
        If value is an `int` that is too large to be a JavaScript number.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return "null"
    try:
        return format_number(value)
    except OverflowError as e:
        raise UnserializableValueStringifyError(
            "int is too large to convert to a JavaScript number", value=value
        ) from e
