from __future__ import annotations

from dataclasses import dataclass

from jsstringify._pycompat.dataclasses import slots_if310


@dataclass(frozen=True, eq=False, **slots_if310())
class JSSymbol:
    """
    A Python equivalent of a JavaScript Symbol.

    Symbols are unique: two symbols with the same description are different
    property keys. `JSON.stringify` never writes symbol-keyed properties, and
    treats symbol values like `undefined`.

    >>> JSSymbol("id") == JSSymbol("id")
    False
    >>> JSSymbol("id")
    JSSymbol('id')
    """

    description: str | None = None

    def __repr__(self) -> str:
        if self.description is None:
            return "JSSymbol()"
        return f"JSSymbol({self.description!r})"
