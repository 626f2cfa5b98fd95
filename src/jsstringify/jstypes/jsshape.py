from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Final

from jsstringify._pycompat.enum import IterableFlag

if TYPE_CHECKING:
    from jsstringify.jstypes._normalise_property_key import PropertyKey
    from jsstringify.jstypes.jsobject import JSObject


class PropertyAttributes(IterableFlag):
    """The attributes of a named property that affect JSON serialization.

    A property without `Enumerable` is skipped when enumerating keys. An
    `Accessor` property is a getter/setter pair, reading it calls the getter.
    """

    Enumerable = 1
    Accessor = 2


DEFAULT_ATTRIBUTES: Final = PropertyAttributes.Enumerable
"""The attributes of a property created by assignment."""

_transitions_lock: Final = threading.Lock()


class JSShape:
    """
    The hidden class of a [`JSObject`](`jsstringify.jstypes.JSObject`).

    A shape records an object's prototype and the ordered keys and attributes
    of its named properties (not its array index properties). Objects that are
    built by adding the same keys in the same order share the same shape
    instance: shapes form a tree rooted at a prototype's initial shape, and
    adding a property follows (or creates) an interned transition to a child
    shape. This allows facts derived from a shape's keys to be cached and
    reused for every object with that shape.

    Deleting a property or changing a property's attributes moves an object to
    a *dictionary mode* shape. Dictionary mode shapes are unique to one object
    and never take part in transitions, so nothing is cached for them.

    Shapes are immutable. They are held weakly by caches, so they live as long
    as an object or transition references them.

    >>> root = JSShape.root(None)
    >>> a = root.with_property("a", DEFAULT_ATTRIBUTES)
    >>> a is root.with_property("a", DEFAULT_ATTRIBUTES)
    True
    >>> a.keys
    ('a',)
    """

    __slots__ = (
        "prototype",
        "keys",
        "attributes",
        "dictionary_mode",
        "_transitions",
        "_positions",
        "__weakref__",
    )

    prototype: JSObject | None
    keys: tuple[PropertyKey, ...]
    attributes: tuple[PropertyAttributes, ...]
    dictionary_mode: bool
    _transitions: dict[tuple[PropertyKey, PropertyAttributes], JSShape]
    _positions: dict[PropertyKey, int] | None

    def __init__(
        self,
        prototype: JSObject | None,
        keys: tuple[PropertyKey, ...] = (),
        attributes: tuple[PropertyAttributes, ...] = (),
        *,
        dictionary_mode: bool = False,
    ) -> None:
        if len(keys) != len(attributes):
            raise ValueError("keys and attributes must have the same length")
        self.prototype = prototype
        self.keys = keys
        self.attributes = attributes
        self.dictionary_mode = dictionary_mode
        self._transitions = {}
        self._positions = None

    @staticmethod
    def root(prototype: JSObject | None) -> JSShape:
        """Get the shared initial shape of objects created with a prototype."""
        if prototype is None:
            return _NULL_PROTOTYPE_ROOT
        root = prototype._instance_root_shape
        if root is None:
            with _transitions_lock:
                root = prototype._instance_root_shape
                if root is None:
                    root = JSShape(prototype)
                    prototype._instance_root_shape = root
        return root

    def __len__(self) -> int:
        return len(self.keys)

    def __contains__(self, key: object) -> bool:
        return key in self._key_positions()

    def __repr__(self) -> str:
        mode = ", dictionary_mode=True" if self.dictionary_mode else ""
        return f"JSShape(keys={self.keys!r}{mode})"

    def _key_positions(self) -> dict[PropertyKey, int]:
        positions = self._positions
        if positions is None:
            positions = {key: i for i, key in enumerate(self.keys)}
            self._positions = positions
        return positions

    def attributes_of(self, key: PropertyKey) -> PropertyAttributes | None:
        """Get the attributes of a key, or None if the shape has no such key."""
        position = self._key_positions().get(key)
        if position is None:
            return None
        return self.attributes[position]

    def with_property(
        self, key: PropertyKey, attributes: PropertyAttributes
    ) -> JSShape:
        """Get the shape that results from adding a new property."""
        if key in self:
            raise ValueError(f"Shape already has a property {key!r}")
        keys = (*self.keys, key)
        attrs = (*self.attributes, attributes)

        if self.dictionary_mode:
            return JSShape(self.prototype, keys, attrs, dictionary_mode=True)

        transition = (key, attributes)
        shape = self._transitions.get(transition)
        if shape is None:
            with _transitions_lock:
                shape = self._transitions.get(transition)
                if shape is None:
                    shape = JSShape(self.prototype, keys, attrs)
                    self._transitions[transition] = shape
        return shape

    def with_attributes(
        self, key: PropertyKey, attributes: PropertyAttributes
    ) -> JSShape:
        """Get a dictionary mode shape with a property's attributes changed."""
        position = self._key_positions()[key]
        attrs = list(self.attributes)
        attrs[position] = attributes
        return JSShape(self.prototype, self.keys, tuple(attrs), dictionary_mode=True)

    def without_property(self, key: PropertyKey) -> JSShape:
        """Get a dictionary mode shape with a property removed."""
        position = self._key_positions()[key]
        return JSShape(
            self.prototype,
            self.keys[:position] + self.keys[position + 1 :],
            self.attributes[:position] + self.attributes[position + 1 :],
            dictionary_mode=True,
        )

    def with_prototype(self, prototype: JSObject | None) -> JSShape:
        """Get the shape with the same properties and a different prototype."""
        if self.dictionary_mode:
            return JSShape(
                prototype, self.keys, self.attributes, dictionary_mode=True
            )
        shape = JSShape.root(prototype)
        for key, attributes in zip(self.keys, self.attributes):
            shape = shape.with_property(key, attributes)
        return shape


_NULL_PROTOTYPE_ROOT: Final = JSShape(None)
