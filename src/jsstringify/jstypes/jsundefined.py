from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from typing_extensions import TypeAlias


class JSUndefinedEnum(Enum):
    """Defines the JSUndefined enum value."""

    JSUndefined = "JSUndefined"
    """
    Represents the JavaScript value `undefined`.

    `JSON.stringify` omits object properties whose value is `undefined`, writes
    `null` for `undefined` array elements, and returns `undefined` (rather than
    a string) when the top-level value is `undefined`.
    """

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    def __bool__(self) -> bool:
        return False


JSUndefinedType: TypeAlias = Literal[JSUndefinedEnum.JSUndefined]
JSUndefined: Final = JSUndefinedEnum.JSUndefined
"""Represents the JavaScript value `undefined`."""
