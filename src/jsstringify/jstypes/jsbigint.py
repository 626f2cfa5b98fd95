from __future__ import annotations

from dataclasses import dataclass

from jsstringify._pycompat.dataclasses import slots_if310


@dataclass(frozen=True, order=True, **slots_if310())
class JSBigInt:
    """
    A Python equivalent of a JavaScript BigInt.

    Python `int` values are JavaScript numbers (64-bit floats). Wrap an `int`
    in `JSBigInt` to represent a BigInt instead. `JSON.stringify` throws a
    `TypeError` when asked to serialize a BigInt.
    """

    value: int

    def __int__(self) -> int:
        return self.value
