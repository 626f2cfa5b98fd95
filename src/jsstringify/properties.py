"""How JSON serialization sees the properties of Python and JavaScript values.

`dict`, `list` and `tuple` behave like plain JavaScript objects and arrays: they
inherit from [`OBJECT_PROTOTYPE`](`jsstringify.jstypes.OBJECT_PROTOTYPE`) and
[`ARRAY_PROTOTYPE`](`jsstringify.jstypes.ARRAY_PROTOTYPE`), and their keys are
JavaScript property keys. `JSObject` and `JSArray` carry their own prototype,
property attributes and hidden class.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Protocol

from jsstringify._errors import UnhandledValueStringifyError
from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.constants import Disqualification
from jsstringify.jstypes._normalise_property_key import (
    is_array_index,
    normalise_property_key,
)
from jsstringify.jstypes.jsarray import ARRAY_PROTOTYPE, JSArray
from jsstringify.jstypes.jsconsstring import JSConsString
from jsstringify.jstypes.jsobject import OBJECT_PROTOTYPE, JSObject
from jsstringify.jstypes.jsshape import PropertyAttributes
from jsstringify.jstypes.jssymbol import JSSymbol

if TYPE_CHECKING:
    from typing import Callable

    from typing_extensions import TypeAlias

    from jsstringify.shapecache import ShapeKey

ToJSONFn: TypeAlias = "Callable[[Any, str], object]"
"""A `toJSON` method, called as `to_json(this, key)`."""


def date_to_json(this: datetime, key: str) -> str:
    """JavaScript's `Date.prototype.toJSON`, for Python `datetime` values.

    Naive datetimes are in local time, as for `datetime.timestamp()`.

    >>> from datetime import datetime, timezone
    >>> date_to_json(datetime(2024, 5, 6, 7, 8, 9, 123456, timezone.utc), "")
    '2024-05-06T07:08:09.123Z'
    """
    utc = this.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}T"
        f"{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}."
        f"{utc.microsecond // 1000:03d}Z"
    )


def inherits_to_json(prototype: JSObject | None) -> bool:
    """Check if a prototype chain defines a `toJSON` property."""
    while prototype is not None:
        if "toJSON" in prototype:
            return True
        prototype = prototype.prototype
    return False


class PropertyEnumerationProvider(Protocol):
    """Answers questions about the properties of values being serialized.

    The first group of methods is used by the fast path. They must never run
    user code: no getters, no `toJSON`, no overridden `__getitem__`. The
    second group implements the JavaScript operations used by the general
    serializer, which can run user code.
    """

    def shape_of(self, value: object) -> ShapeKey | None:
        """Get the shape identity of an object, or None if it can't be cached."""

    def check_container(self, value: object) -> Disqualification | None:
        """Check the per-object conditions for the fast path.

        These are conditions that can change for an object without its shape
        changing, such as its prototype chain gaining a `toJSON` method, or a
        `JSObject` gaining an indexed property.
        """

    def fast_keys(
        self, value: object, *, trusted: bool
    ) -> list[str] | Disqualification:
        """Get the keys of an object for the fast path.

        The result only depends on the object's shape. When `trusted` is true
        the shape is already known to be eligible and the keys are returned
        without being checked.
        """

    def array_length(self, value: object) -> int:
        """Get the length of an array-like value."""

    def read_member(self, container: object, key: str | int) -> object:
        """Read an own data property without side effects."""

    def is_array(self, value: object) -> bool:
        """Check if a value is an array, like JavaScript's `IsArray()`."""

    def is_object(self, value: object) -> bool:
        """Check if a value is a non-array object that has properties."""

    def own_enumerable_keys(self, value: object) -> list[str]:
        """Get own enumerable string keys, in JavaScript property order."""

    def get(self, container: object, key: str | int) -> object:
        """Read a property like JavaScript's `obj[key]`, calling getters."""

    def lookup_to_json(self, value: object) -> ToJSONFn | None:
        """Find the `toJSON` method that applies to a value, if any."""


@dataclass(**slots_if310())
class DefaultPropertyProvider(PropertyEnumerationProvider):
    """Provides the properties of Python and `jsstringify.jstypes` values.

    >>> provider = DefaultPropertyProvider()
    >>> provider.own_enumerable_keys({"b": 1, 2: "x", "a": 3, "0": "y"})
    ['0', '2', 'b', 'a']
    >>> provider.fast_keys({"a": 1, "1": 2}, trusted=False)
    <Disqualification.IndexedProperty: 'indexed property on a non-array object'>
    """

    # Fast path

    def shape_of(self, value: object) -> ShapeKey | None:
        if type(value) is dict:
            return tuple(value)
        if type(value) is JSObject:
            shape = value.shape
            return None if shape.dictionary_mode else shape
        return None

    def check_container(self, value: object) -> Disqualification | None:
        value_type = type(value)
        if value_type is dict:
            if inherits_to_json(OBJECT_PROTOTYPE):
                return Disqualification.CustomToJSON
            return None
        if value_type is list or value_type is tuple:
            if inherits_to_json(ARRAY_PROTOTYPE):
                return Disqualification.CustomToJSON
            return None
        if value_type is JSObject:
            assert isinstance(value, JSObject)
            if value.prototype is not OBJECT_PROTOTYPE:
                return Disqualification.NonStandardPrototype
            if inherits_to_json(OBJECT_PROTOTYPE):
                return Disqualification.CustomToJSON
            if value.elements:
                return Disqualification.IndexedProperty
            return None
        if value_type is JSArray:
            assert isinstance(value, JSArray)
            if value.prototype is not ARRAY_PROTOTYPE:
                return Disqualification.NonStandardPrototype
            if inherits_to_json(ARRAY_PROTOTYPE):
                return Disqualification.CustomToJSON
            if value.has_holes:
                return Disqualification.HoleyArray
            return None
        return Disqualification.UnsupportedValue

    def fast_keys(
        self, value: object, *, trusted: bool
    ) -> list[str] | Disqualification:
        if type(value) is dict:
            return _dict_fast_keys(value, trusted=trusted)
        assert type(value) is JSObject
        shape = value.shape
        if trusted:
            return list(shape.keys)  # type: ignore[arg-type]
        for key, attributes in zip(shape.keys, shape.attributes):
            if type(key) is not str:
                return Disqualification.SymbolKey
            if attributes & PropertyAttributes.Accessor:
                return Disqualification.AccessorProperty
            if not attributes & PropertyAttributes.Enumerable:
                return Disqualification.NonEnumerableKey
            if key == "toJSON":
                return Disqualification.CustomToJSON
        return list(shape.keys)  # type: ignore[arg-type]

    def array_length(self, value: object) -> int:
        if isinstance(value, JSArray):
            return value.length
        assert isinstance(value, (list, tuple))
        return len(value)

    def read_member(self, container: object, key: str | int) -> object:
        container_type = type(container)
        if container_type is JSObject:
            assert isinstance(container, JSObject)
            return container.properties[key]  # type: ignore[index]
        if container_type is JSArray:
            assert isinstance(container, JSArray)
            return container.elements[key]  # type: ignore[index]
        return container[key]  # type: ignore[index]

    # General path

    def is_array(self, value: object) -> bool:
        return isinstance(value, (list, tuple, JSArray))

    def is_object(self, value: object) -> bool:
        return isinstance(value, (JSObject, Mapping)) and not isinstance(
            value, JSArray
        )

    def own_enumerable_keys(self, value: object) -> list[str]:
        if isinstance(value, JSObject):
            return [key if type(key) is str else str(key) for key in value]
        assert isinstance(value, Mapping)

        indexes: list[int] = []
        names: list[str] = []
        seen: set[str | int] = set()
        for raw_key in value:
            if isinstance(raw_key, JSSymbol):
                continue
            if isinstance(raw_key, JSConsString):
                raw_key = raw_key.flatten()
            if not isinstance(raw_key, (str, int, float)):
                raise UnhandledValueStringifyError(
                    "Mapping key cannot be a JavaScript property key", value=raw_key
                )
            key = normalise_property_key(raw_key)
            if key in seen:
                continue
            seen.add(key)  # type: ignore[arg-type]
            if type(key) is int:
                indexes.append(key)
            else:
                names.append(key)  # type: ignore[arg-type]
        indexes.sort()
        return [*(str(i) for i in indexes), *names]

    def get(self, container: object, key: str | int) -> object:
        if isinstance(container, JSObject):
            return container.lookup(key)
        if isinstance(container, (list, tuple)):
            index = normalise_property_key(key)
            if type(index) is int and index < len(container):
                return container[index]
            return ARRAY_PROTOTYPE.lookup(index, receiver=container)
        assert isinstance(container, Mapping)
        return _mapping_get(container, key)

    def lookup_to_json(self, value: object) -> ToJSONFn | None:
        if isinstance(value, JSObject):
            to_json = value.lookup("toJSON")
        elif isinstance(value, datetime):
            return date_to_json
        elif isinstance(value, Mapping):
            if "toJSON" in value:
                to_json = value["toJSON"]
            else:
                to_json = OBJECT_PROTOTYPE.lookup("toJSON", receiver=value)
        elif isinstance(value, (list, tuple)):
            to_json = ARRAY_PROTOTYPE.lookup("toJSON", receiver=value)
        else:
            return None
        return to_json if callable(to_json) else None


def _dict_fast_keys(
    value: dict[Any, Any], *, trusted: bool
) -> list[str] | Disqualification:
    keys = list(value)
    for key in keys:
        if type(key) is not str:
            return _non_str_key_disqualification(key)
        # A cached key tuple compares equal to keys of str subclasses, so only
        # the type is checked for trusted shapes.
        if trusted:
            continue
        if key == "toJSON":
            return Disqualification.CustomToJSON
        if is_array_index(key):
            return Disqualification.IndexedProperty
    return keys


def _non_str_key_disqualification(key: object) -> Disqualification:
    if isinstance(key, JSSymbol):
        return Disqualification.SymbolKey
    if isinstance(key, (str, JSConsString)):
        return Disqualification.NonFlatString
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        if type(normalise_property_key(key)) is int:
            return Disqualification.IndexedProperty
    return Disqualification.NonStringKey


def _mapping_get(mapping: Mapping[Any, Any], key: str | int) -> object:
    if type(key) is str and key in mapping:
        return mapping[key]
    normalised = normalise_property_key(key)
    for raw_key in mapping:
        candidate = raw_key
        if isinstance(candidate, JSConsString):
            candidate = candidate.flatten()
        if isinstance(candidate, (str, int, float)):
            if normalise_property_key(candidate) == normalised:
                return mapping[raw_key]
    return OBJECT_PROTOTYPE.lookup(normalised, receiver=mapping)


default_property_provider: DefaultPropertyProvider = DefaultPropertyProvider()
