from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, cast

from jsstringify._pycompat.dataclasses import slots_if310


@dataclass(init=False)
class JSStringifyError(Exception):
    """The base class that all jsstringify errors are subclasses of."""

    if not TYPE_CHECKING:
        message: str  # needed to have dataclass include message in the repr, etc

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)

    @property
    def message(self) -> str:
        return cast(str, self.args[0])

    def __str__(self) -> str:
        field_values = [
            (f.name, getattr(self, f.name)) for f in fields(self) if f.name != "message"
        ]
        values_fmt = ", ".join(f"{f}={_abbreviated_repr(v)}" for (f, v) in field_values)

        if values_fmt:
            return f"{self.message}: {values_fmt}"
        return self.message


def _abbreviated_repr(value: object, limit: int = 80) -> str:
    try:
        text = repr(value)
    except RecursionError:
        return f"<{type(value).__name__}>"
    if len(text) > limit:
        return f"{text[:limit - 3]}..."
    return text


@dataclass(init=False)
class CircularStructureStringifyError(JSStringifyError, TypeError):
    """
    A value contains a reference to one of the objects that contain it.

    JSON has no way to represent cyclic references, so (like JavaScript's
    `JSON.stringify`) serializing a cyclic structure is a `TypeError`.
    """

    value: object

    def __init__(self, message: str, *args: object, value: object) -> None:
        super().__init__(message, *args)
        self.value = value


@dataclass(init=False)
class UnserializableValueStringifyError(JSStringifyError, TypeError):
    """A JavaScript value that `JSON.stringify` refuses to serialize, like BigInt."""

    value: object

    def __init__(self, message: str, *args: object, value: object) -> None:
        super().__init__(message, *args)
        self.value = value


@dataclass(init=False)
class UnhandledValueStringifyError(JSStringifyError, TypeError):
    """
    A Python value has no JavaScript equivalent that can be serialized.

    Raised for Python objects that are not one of the types listed in
    [`stringify()`](`jsstringify.stringify`), or a `dict` key that cannot be a
    JavaScript property key.
    """

    value: object

    def __init__(self, message: str, *args: object, value: object) -> None:
        super().__init__(message, *args)
        self.value = value


@dataclass(init=False)
class BufferFinalizedError(JSStringifyError, ValueError):
    """An `OutputBuffer` was used after it was finalized."""


@dataclass(init=False, **slots_if310())
class NormalizedKeyError(KeyError):
    """A JSObject does not contain a property for the requested key.

    JSObjects store and look up integer keys differently from non-integer keys,
    so the actual key used in the lookup may not be the same as the same as the
    original, raw key. The `normalized_key` and `raw_key` properties hold both
    versions of the key.
    """

    normalized_key: object
    raw_key: object

    def __init__(self, normalized_key: object, raw_key: object) -> None:
        self.normalized_key = normalized_key
        self.raw_key = raw_key
        super(NormalizedKeyError, self).__init__(
            f"{self.normalized_key!r} (normalized from {self.raw_key!r})"
        )
