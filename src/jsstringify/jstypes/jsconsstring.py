from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from jsstringify._pycompat.dataclasses import slots_if310


@dataclass(frozen=True, **slots_if310())
class JSConsString:
    """
    A lazily-concatenated JavaScript string.

    JavaScript engines represent the result of `a + b` as a tree node that
    references both halves, and only copy the characters into a flat string
    when something needs to read them. Reading a `JSConsString` therefore
    requires allocating and copying: the fast JSON path treats it as a reason
    to hand off to the general serializer, which flattens it.

    Examples
    --------
    >>> s = JSConsString("Hello, ", "World") + "!"
    >>> s.flatten()
    'Hello, World!'
    >>> len(s)
    13
    """

    first: Union[str, JSConsString]
    second: Union[str, JSConsString]

    def __add__(self, other: str | JSConsString) -> JSConsString:
        return JSConsString(self, other)

    def __radd__(self, other: str | JSConsString) -> JSConsString:
        return JSConsString(other, self)

    def __len__(self) -> int:
        return sum(len(part) for part in self._parts())

    def __str__(self) -> str:
        return self.flatten()

    def _parts(self) -> list[str]:
        parts: list[str] = []
        pending: list[str | JSConsString] = [self]
        while pending:
            node = pending.pop()
            if isinstance(node, JSConsString):
                pending.append(node.second)
                pending.append(node.first)
            else:
                parts.append(node)
        return parts

    def flatten(self) -> str:
        """Copy the characters of both halves into a single `str`."""
        return "".join(self._parts())
