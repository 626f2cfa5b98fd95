from __future__ import annotations

from typing import Union

from jsstringify.constants import MAX_ARRAY_LENGTH
from jsstringify.jstypes.jssymbol import JSSymbol
from jsstringify.number_format import format_number

PropertyKey = Union[str, int, JSSymbol]
"""A normalised property key: an array index int, a name str or a symbol."""


def canonical_numeric_index_string(value: str) -> int | None:
    """Get the int representation of value or None.

    The result is None unless interpreting value as a base10 int and back to a
    string is equal to value.

    This is very similar to the ECMA spec's function, except that negative
    values are returned as None.
    https://tc39.es/ecma262/#sec-canonicalnumericindexstring
    """
    # isdecimal includes non-ascii decimal numbers.
    if value.isdecimal() and value.isascii():
        int_value = int(value)
        # numbers with unnecessary leading zeros are not canonical
        return None if value[0] == "0" and value != "0" else int_value
    return None


def is_array_index(value: str) -> bool:
    """Check if a str property name is an array index.

    >>> is_array_index("12")
    True
    >>> is_array_index("012")
    False
    >>> is_array_index(str(2**32 - 1))
    False
    """
    int_value = canonical_numeric_index_string(value)
    return int_value is not None and int_value < MAX_ARRAY_LENGTH


def normalise_property_key(key: str | int | float | JSSymbol) -> PropertyKey:
    """Get the canonical representation of a JavaScript property key.

    A key is an int if the str value is the base10 representation of the same
    integer and falls in the inclusive range 0..2**32-2 (which is the max
    JavaScript array index). Other numbers become the str JavaScript would
    convert them to, and `str` subclasses become plain `str`. Symbols are
    returned unchanged.

    >>> normalise_property_key('3')
    3
    >>> normalise_property_key('A')
    'A'
    >>> normalise_property_key('-3')
    '-3'
    >>> normalise_property_key(1.0)
    1
    >>> normalise_property_key("-0")
    '-0'
    >>> normalise_property_key(-0.0)
    0
    >>> normalise_property_key(-1.5)
    '-1.5'
    >>> normalise_property_key(1e-7)
    '1e-7'
    >>> normalise_property_key(True)
    'true'

    This reflects the behaviour defined in: https://tc39.es/ecma262/#integer-index
    """
    if isinstance(key, JSSymbol):
        return key
    if isinstance(key, str):
        int_value = canonical_numeric_index_string(key)
        if int_value is None:
            return key if type(key) is str else str.__str__(key)
        key = int_value
    elif isinstance(key, bool):
        return "true" if key else "false"

    if isinstance(key, int) or key.is_integer():
        if 0 <= key < MAX_ARRAY_LENGTH:
            return int(key)
    return format_number(key)
