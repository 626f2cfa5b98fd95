from __future__ import annotations

import keyword
import reprlib
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from itertools import chain
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Final, Union, overload

from jsstringify._errors import NormalizedKeyError
from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.jstypes._normalise_property_key import (
    PropertyKey,
    normalise_property_key,
)
from jsstringify.jstypes.jshole import JSHole
from jsstringify.jstypes.jsshape import DEFAULT_ATTRIBUTES, JSShape, PropertyAttributes
from jsstringify.jstypes.jssymbol import JSSymbol
from jsstringify.jstypes.jsundefined import JSUndefined

if TYPE_CHECKING:
    # We use TypeVar's default param which isn't in stdlib yet.
    from typing_extensions import Self, TypeVar

    from _typeshed import SupportsKeysAndGetItem

    T = TypeVar("T", default=object)

RawPropertyKey = Union[str, int, float, JSSymbol]


@dataclass(frozen=True, **slots_if310())
class JSAccessor:
    """The getter and setter functions of an accessor property.

    JavaScript functions are Python callables that receive `this` as their
    first argument: `get(this)` and `set(this, value)`.
    """

    get: Callable[[Any], object] | None = None
    set: Callable[[Any, Any], object] | None = None


@dataclass(frozen=True, **slots_if310())
class JSPropertyDescriptor:
    """The state of one own property, like `Object.getOwnPropertyDescriptor()`."""

    value: object = JSUndefined
    get: Callable[[Any], object] | None = None
    set: Callable[[Any, Any], object] | None = None
    enumerable: bool = True

    @property
    def is_accessor(self) -> bool:
        return self.get is not None or self.set is not None


_MISSING: Final = object()


class JSObject(MutableMapping["str | int", "T"]):
    """
    A Python equivalent of [JavaScript plain objects][JavaScript Object].

    `JSObject` is a [Python Mapping], whose keys can be strings or numbers.
    JavaScript Objects treat integer keys and integer strings as equivalent, and
    `JSObject` does too. Integer keys that are array indexes are *indexed
    properties*, held apart from *named properties*.

    Unlike a `dict`, a `JSObject` models the parts of a JavaScript object that
    affect `JSON.stringify`:

    * a prototype, whose properties (such as a `toJSON` method) are inherited;
    * symbol keys, non-enumerable properties and accessor (getter/setter)
      properties, created with [`define_property()`];
    * a hidden class ([`JSShape`]) shared by objects with the same prototype
      and the same named properties added in the same order.

    The Mapping interface works with own properties, and iterates over the own
    enumerable string keys in JavaScript's order: array indexes in ascending
    order, then names in order of creation. Reading an accessor property calls
    its getter.

    Parameters
    ----------
    properties
        The items to populate the object with, either as a mapping to copy, or
        an iterable of `(key, value)` pairs.
    kwarg_properties
        Additional key-values to populate the object with. These override any
        items from `properties` with the same key.

    [Python Mapping]: https://docs.python.org/3/glossary.html#term-mapping
    [JavaScript Object]: https://developer.mozilla.org/en-US/docs/Web/\
JavaScript/Reference/Global_Objects/Object
    [`define_property()`]: `jsstringify.jstypes.JSObject.define_property`
    [`JSShape`]: `jsstringify.jstypes.JSShape`

    Examples
    --------
    >>> o = JSObject(name='Bob', likes_hats=False)
    >>> o['name']
    'Bob'
    >>> o['518'] = 'Teapot'
    >>> o['404'] = 'Not Found'

    Properties are kept in order of creation, but array indexes (e.g. strings
    that are non-negative integers) always come first, in numeric order.

    >>> o
    JSObject({404: 'Not Found', 518: 'Teapot'}, name='Bob', likes_hats=False)
    >>> dict(o)
    {404: 'Not Found', 518: 'Teapot', 'name': 'Bob', 'likes_hats': False}

    Objects with the same keys in the same order share a shape.

    >>> JSObject(a=1, b=2).shape is JSObject(a=3, b=4).shape
    True
    """

    __slots__ = (
        "elements",
        "properties",
        "_elements",
        "_values",
        "_shape",
        "_prototype",
        "_instance_root_shape",
    )

    elements: Mapping[int, T]
    """Read-only view of the indexed (array index) properties."""
    properties: Mapping[str | JSSymbol, T | JSAccessor]
    """
    Read-only view of the stored values of named properties.

    Accessor properties are stored as their `JSAccessor`; reading this mapping
    never calls a getter.
    """
    _elements: dict[int, T]
    _values: dict[str | JSSymbol, T | JSAccessor]
    _shape: JSShape
    _prototype: JSObject | None
    _instance_root_shape: JSShape | None
    """The initial shape of objects that use this object as their prototype."""

    @overload
    def __init__(self, /, **kwargs: T) -> None: ...

    @overload
    def __init__(
        self, properties: SupportsKeysAndGetItem[str | int, T], /, **kwargs: T
    ) -> None: ...

    @overload
    def __init__(
        self, properties: Iterable[tuple[str | int, T]], /, **kwargs: T
    ) -> None: ...

    def __init__(
        self,
        properties: (
            SupportsKeysAndGetItem[str | int, T] | Iterable[tuple[str | int, T]]
        ) = (),
        /,
        **kwarg_properties: T,
    ) -> None:
        self._init_storage(self._default_prototype())
        self.update(properties)
        if kwarg_properties:
            self.update(kwarg_properties)

    @classmethod
    def create(
        cls,
        prototype: JSObject | None,
        properties: (
            SupportsKeysAndGetItem[str | int, T] | Iterable[tuple[str | int, T]]
        ) = (),
        /,
        **kwarg_properties: T,
    ) -> Self:
        """Create an object with a specific prototype, like `Object.create()`.

        >>> bare = JSObject.create(None, a=1)
        >>> bare.prototype is None
        True
        """
        obj = cls.__new__(cls)
        obj._init_storage(prototype)
        obj.update(properties)
        if kwarg_properties:
            obj.update(kwarg_properties)
        return obj

    @classmethod
    def _default_prototype(cls) -> JSObject | None:
        return OBJECT_PROTOTYPE

    def _init_storage(self, prototype: JSObject | None) -> None:
        self._elements = {}
        self._values = {}
        # Read-only views. Writes must go through the object so that indexed
        # properties and the shape stay consistent.
        self.elements = MappingProxyType(self._elements)
        self.properties = MappingProxyType(self._values)
        self._prototype = prototype
        self._shape = JSShape.root(prototype)
        self._instance_root_shape = None

    @property
    def shape(self) -> JSShape:
        """The hidden class describing the object's named properties."""
        return self._shape

    @property
    def prototype(self) -> JSObject | None:
        """The object that properties are inherited from."""
        return self._prototype

    @prototype.setter
    def prototype(self, prototype: JSObject | None) -> None:
        ancestor = prototype
        while ancestor is not None:
            if ancestor is self:
                raise TypeError("Cyclic prototype value")
            ancestor = ancestor._prototype
        self._prototype = prototype
        self._shape = self._shape.with_prototype(prototype)

    def __getitem__(self, key: RawPropertyKey, /) -> T:
        k = normalise_property_key(key)
        if type(k) is int:
            elements = self._elements
            if k in elements:
                return elements[k]
            raise NormalizedKeyError(k, raw_key=key)
        values = self._values
        if k in values:
            return self._read_stored(values[k], receiver=self)
        raise NormalizedKeyError(k, raw_key=key)

    @staticmethod
    def _read_stored(stored: Any, receiver: object) -> Any:
        if type(stored) is JSAccessor:
            if stored.get is None:
                return JSUndefined
            return stored.get(receiver)
        return stored

    def __setitem__(self, key: RawPropertyKey, value: T, /) -> None:
        k = normalise_property_key(key)
        if value is JSHole:
            if k in self:
                del self[k]
            return
        if type(k) is int:
            self._set_element(k, value)
            return

        attributes = self._shape.attributes_of(k)
        if attributes is None:
            self._shape = self._shape.with_property(k, DEFAULT_ATTRIBUTES)
        elif attributes & PropertyAttributes.Accessor:
            accessor = self._values[k]
            assert isinstance(accessor, JSAccessor)
            if accessor.set is None:
                raise TypeError(
                    f"Cannot set property {k!r} which has only a getter"
                )
            accessor.set(self, value)
            return
        self._values[k] = value

    def _set_element(self, index: int, value: T) -> None:
        self._elements[index] = value

    def __delitem__(self, key: RawPropertyKey, /) -> None:
        k = normalise_property_key(key)
        if type(k) is int:
            if k in self._elements:
                del self._elements[k]
                return
            raise NormalizedKeyError(k, raw_key=key)
        if k in self._values:
            del self._values[k]
            self._shape = self._shape.without_property(k)
            return
        raise NormalizedKeyError(k, raw_key=key)

    def __contains__(self, key: object) -> bool:
        # The Mapping default calls __getitem__, which would call getters.
        if not isinstance(key, (str, int, float, JSSymbol)):
            return False
        k = normalise_property_key(key)
        if type(k) is int:
            return k in self._elements
        return k in self._values

    def has_own_property(self, key: RawPropertyKey) -> bool:
        """Check for an own property, enumerable or not."""
        return key in self

    def _enumerable_names(self) -> Iterator[str]:
        shape = self._shape
        return (
            key
            for key, attributes in zip(shape.keys, shape.attributes)
            if type(key) is str and attributes & PropertyAttributes.Enumerable
        )

    def __iter__(self) -> Iterator[str | int]:
        return chain(sorted(self._elements), self._enumerable_names())

    def __len__(self) -> int:
        return len(self._elements) + sum(1 for _ in self._enumerable_names())

    def own_property_keys(self) -> list[PropertyKey]:
        """Get all own keys in order, like `Reflect.ownKeys()`.

        Includes non-enumerable names, then symbols after all string keys.
        """
        keys = self._shape.keys
        return [
            *sorted(self._elements),
            *(k for k in keys if type(k) is str),
            *(k for k in keys if type(k) is JSSymbol),
        ]

    def define_property(
        self,
        key: RawPropertyKey,
        value: object = _MISSING,
        *,
        get: Callable[[Any], object] | None = None,
        set: Callable[[Any, Any], object] | None = None,
        enumerable: bool = True,
    ) -> None:
        """Create or redefine an own property, like `Object.defineProperty()`.

        Pass `get` and/or `set` to create an accessor property, or `value` to
        create a data property. Redefining an existing property's attributes
        moves the object to a dictionary mode shape.

        >>> o = JSObject(a=1)
        >>> o.define_property("hidden", 2, enumerable=False)
        >>> o.define_property("twice", get=lambda this: this["a"] * 2)
        >>> dict(o)
        {'a': 1, 'twice': 2}
        >>> o["hidden"]
        2
        """
        is_accessor = get is not None or set is not None
        if is_accessor and value is not _MISSING:
            raise TypeError(
                "Invalid property descriptor. Cannot both specify accessors "
                "and a value"
            )
        k = normalise_property_key(key)
        if type(k) is int:
            if is_accessor or not enumerable:
                raise ValueError(
                    "Only enumerable data properties can be defined with array "
                    f"index keys: {k!r}"
                )
            self._set_element(k, JSUndefined if value is _MISSING else value)
            return

        attributes = PropertyAttributes(0)
        if enumerable:
            attributes |= PropertyAttributes.Enumerable
        if is_accessor:
            attributes |= PropertyAttributes.Accessor
            stored: object = JSAccessor(get=get, set=set)
        else:
            stored = JSUndefined if value is _MISSING else value

        existing = self._shape.attributes_of(k)
        if existing is None:
            self._shape = self._shape.with_property(k, attributes)
        elif existing != attributes:
            self._shape = self._shape.with_attributes(k, attributes)
        self._values[k] = stored

    def get_own_property(self, key: RawPropertyKey) -> JSPropertyDescriptor | None:
        """Describe an own property without calling its getter."""
        k = normalise_property_key(key)
        if type(k) is int:
            if k not in self._elements:
                return None
            return JSPropertyDescriptor(value=self._elements[k])
        attributes = self._shape.attributes_of(k)
        if attributes is None:
            return None
        stored = self._values[k]
        enumerable = bool(attributes & PropertyAttributes.Enumerable)
        if isinstance(stored, JSAccessor):
            return JSPropertyDescriptor(
                get=stored.get, set=stored.set, enumerable=enumerable
            )
        return JSPropertyDescriptor(value=stored, enumerable=enumerable)

    def lookup(self, key: RawPropertyKey, *, receiver: object = None) -> Any:
        """Get a property from the object or its prototype chain.

        This is JavaScript's `obj[key]`: inherited properties are found,
        getters are called with `receiver` (the object itself by default) as
        `this`, and missing properties are `JSUndefined`.

        >>> JSObject.create(JSObject(greeting="hi")).lookup("greeting")
        'hi'
        >>> JSObject().lookup("missing")
        JSUndefined
        """
        k = normalise_property_key(key)
        if receiver is None:
            receiver = self
        obj: JSObject | None = self
        while obj is not None:
            if type(k) is int:
                if k in obj._elements:
                    return obj._elements[k]
            elif k in obj._values:
                return self._read_stored(obj._values[k], receiver=receiver)
            obj = obj._prototype
        return JSUndefined

    def __eq__(self, other: object) -> bool:
        # JSObject is only equal to other JSObject, not other Mappings, and
        # JSArray is only equal to other JSArray.
        if other is self:
            return True
        if not isinstance(other, JSObject):
            return NotImplemented
        if type(self) is not type(other):
            return NotImplemented
        return (
            self._prototype is other._prototype
            and self._elements == other._elements
            and self._values == other._values
            and self._attributes_by_key() == other._attributes_by_key()
        )

    __hash__ = None  # type: ignore[assignment]

    def _attributes_by_key(self) -> dict[PropertyKey, PropertyAttributes]:
        shape = self._shape
        return dict(zip(shape.keys, shape.attributes))

    def _repr_items(self) -> tuple[dict[object, object], dict[str, object]]:
        """Split own enumerable properties into positional and keyword reprs."""
        positional: dict[object, object] = {
            k: self._elements[k] for k in sorted(self._elements)
        }
        keywords: dict[str, object] = {}
        for key in self._enumerable_names():
            if _is_kwarg_name(key):
                keywords[key] = self._values[key]
            else:
                positional[key] = self._values[key]
        return positional, keywords

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        positional, keywords = self._repr_items()
        args = [repr(positional)] if positional else []
        args.extend(f"{k}={v!r}" for k, v in keywords.items())
        return f"{type(self).__name__}({', '.join(args)})"

    if TYPE_CHECKING:

        def update(self, *args: Any, **kwargs: T) -> None: ...  # type: ignore[override]


def _is_kwarg_name(key: str) -> bool:
    return key.isidentifier() and not keyword.iskeyword(key)


OBJECT_PROTOTYPE: Final[JSObject] = JSObject.create(None)
"""The shared prototype of plain objects, JavaScript's `Object.prototype`.

Properties set on this object are inherited by every `JSObject` and `dict`.
In particular, defining a `toJSON` property here affects JSON serialization of
all objects, as it would in JavaScript.
"""
