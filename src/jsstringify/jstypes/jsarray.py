from __future__ import annotations

import reprlib
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Final

from jsstringify.constants import MAX_ARRAY_LENGTH
from jsstringify.jstypes.jshole import JSHole, JSHoleType
from jsstringify.jstypes.jsobject import OBJECT_PROTOTYPE, JSObject, _is_kwarg_name

if TYPE_CHECKING:
    # We use TypeVar's default param which isn't in stdlib yet.
    from typing_extensions import TypeVar

    T = TypeVar("T", default=object)


class JSArray(JSObject["T"]):
    """
    A Python equivalent of a [JavaScript Array].

    The constructor accepts lists/iterables of values, like `list()` does.
    Otherwise it's functionally the same as [](`jsstringify.jstypes.JSObject`),
    with a `length` that is kept 1 larger than the largest index.

    JavaScript arrays are sparse: indexes below `length` that have no value are
    *holes*. The `.array` property shows them as `JSHole`. `JSON.stringify`
    looks holes up on the prototype chain (usually finding nothing, and writing
    `null`), which the fast path cannot do, so arrays with holes are always
    serialized by the general serializer.

    [JavaScript Array]: https://developer.mozilla.org/en-US/docs/Web/\
JavaScript/Reference/Global_Objects/Array

    Parameters
    ----------
    elements
        Ordered values to populate the array with. `JSHole` values leave a
        hole.
    kwarg_properties
        Named (non-index) properties to populate the array with.

    Examples
    --------
    >>> a = JSArray(['a', 'b'])
    >>> a
    JSArray(['a', 'b'])
    >>> a[0]
    'a'

    As in JavaScript, arrays can also have non-integer properties:

    >>> a['foo'] = 'bar'
    >>> a
    JSArray(['a', 'b'], foo='bar')
    >>> a['2'] = 'c'
    >>> a[5] = 'f'
    >>> a
    JSArray(['a', 'b', 'c', JSHole, JSHole, 'f'], foo='bar')
    >>> a.length
    6
    >>> a.has_holes
    True
    """

    __slots__ = ("_length",)

    _length: int

    def __init__(
        self,
        elements: Iterable[T | JSHoleType] = (),
        /,
        **kwarg_properties: T,
    ) -> None:
        self._init_storage(self._default_prototype())
        self.extend(elements)
        if kwarg_properties:
            self.update(kwarg_properties)

    @classmethod
    def _default_prototype(cls) -> JSObject | None:
        return ARRAY_PROTOTYPE

    def _init_storage(self, prototype: JSObject | None) -> None:
        super()._init_storage(prototype)
        self._length = 0

    def _set_element(self, index: int, value: T) -> None:
        self._elements[index] = value
        if index >= self._length:
            self._length = index + 1

    @property
    def length(self) -> int:
        """The array's length, like JavaScript's `Array.prototype.length`.

        Setting a smaller length removes elements, setting a larger length adds
        holes.
        """
        return self._length

    @length.setter
    def length(self, length: int) -> None:
        if not (0 <= length <= MAX_ARRAY_LENGTH):
            raise ValueError(f"Invalid array length: {length}")
        if length < self._length:
            for index in [i for i in self._elements if i >= length]:
                del self._elements[index]
        self._length = length

    @property
    def has_holes(self) -> bool:
        """Whether any index below `length` has no value."""
        return len(self._elements) != self._length

    @property
    def array(self) -> list[T | JSHoleType]:
        """A list of the indexed values, with `JSHole` for each hole."""
        elements = self._elements
        return [elements.get(i, JSHole) for i in range(self._length)]

    def append(self, value: T | JSHoleType) -> None:
        index = self._length
        if value is JSHole:
            self._length = index + 1
        else:
            self._set_element(index, value)

    def extend(self, values: Iterable[T | JSHoleType]) -> None:
        for value in values:
            self.append(value)

    def __eq__(self, other: object) -> bool:
        result = super().__eq__(other)
        if result is True and other is not self:
            assert isinstance(other, JSArray)
            return self._length == other._length
        return result

    __hash__ = None  # type: ignore[assignment]

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        args = [repr(self.array)] if self._length else []
        others: dict[str, Any] = {}
        for key in self._enumerable_names():
            if _is_kwarg_name(key):
                args.append(f"{key}={self._values[key]!r}")
            else:
                others[key] = self._values[key]
        if others:
            args.append(f"**{others!r}")
        return f"{type(self).__name__}({', '.join(args)})"


ARRAY_PROTOTYPE: Final[JSObject] = JSObject.create(OBJECT_PROTOTYPE)
"""The shared prototype of arrays, JavaScript's `Array.prototype`.

Its prototype is [`OBJECT_PROTOTYPE`](`jsstringify.jstypes.OBJECT_PROTOTYPE`).
`JSArray`, `list` and `tuple` values inherit from it.
"""
