from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final, Literal

if TYPE_CHECKING:
    from typing_extensions import TypeAlias


class JSHoleEnum(Enum):
    """Explicit representation of the empty elements in JavaScript arrays.

    JavaScript arrays are sparse, in that you can set the value of indexes
    beyond the current length. There is a distinction between an empty element
    and one that explicitly contains `undefined`: reading an empty element
    looks the index up on the array's prototype chain, which can run user
    code. JSON serialization writes `null` for empty elements that resolve to
    nothing.

    Assigning JSHole to a [`JSObject`](`jsstringify.jstypes.JSObject`) or
    [`JSArray`](`jsstringify.jstypes.JSArray`) key removes the property.
    """

    JSHole = "JSHole"
    """Explicit representation of the empty elements in JavaScript arrays."""

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


JSHoleType: TypeAlias = Literal[JSHoleEnum.JSHole]
JSHole: Final = JSHoleEnum.JSHole
"""Explicit representation of the empty elements in JavaScript arrays."""
