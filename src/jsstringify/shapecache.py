from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Final, Hashable, Union
from weakref import WeakKeyDictionary

from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.constants import Disqualification
from jsstringify.jstypes.jsshape import JSShape

ShapeKey = Union[JSShape, "tuple[Hashable, ...]"]
"""The identity of an object's shape.

`JSObject` shapes are `JSShape` instances. A `dict` has no hidden class, so its
shape is the tuple of its keys, in order.
"""

DEFAULT_MAX_KEY_TUPLES: Final = 4096


class ShapeStatus(Enum):
    """What is known about serializing the objects of a shape."""

    Unknown = "unknown"
    """The shape has not been fully serialized by the fast path yet."""
    FastJsonIterable = "fast-json-iterable"
    """All keys are enumerable string data properties that need no escaping
    and are narrow, so they can be written without being checked."""
    NeedsKeyScan = "needs-key-scan"
    """Eligible for the fast path, but some key needs escaping or is wide."""
    Disqualified = "disqualified"
    """The shape's keys require the general serializer."""


@dataclass(frozen=True, **slots_if310())
class ShapeCacheEntry:
    status: ShapeStatus
    disqualification: Disqualification | None = None


UNKNOWN_ENTRY: Final = ShapeCacheEntry(ShapeStatus.Unknown)


class ShapeCache:
    """
    A thread-safe record of the fast path's findings about object shapes.

    Entries are keyed by shape identity. `JSShape` entries are held weakly and
    disappear with their shape. `dict` key tuples are held in a bounded
    least-recently-used table. Shapes in dictionary mode are never cached.

    Examples
    --------
    >>> from jsstringify.jstypes import JSObject
    >>> cache = ShapeCache()
    >>> shape = JSObject(a=1).shape
    >>> cache.get(shape).status
    <ShapeStatus.Unknown: 'unknown'>
    >>> cache.record(shape, ShapeStatus.FastJsonIterable)
    >>> cache.get(shape).status
    <ShapeStatus.FastJsonIterable: 'fast-json-iterable'>
    """

    def __init__(self, max_key_tuples: int = DEFAULT_MAX_KEY_TUPLES) -> None:
        self.max_key_tuples = max_key_tuples
        self._lock = threading.Lock()
        self._shapes: WeakKeyDictionary[JSShape, ShapeCacheEntry] = (
            WeakKeyDictionary()
        )
        self._key_tuples: OrderedDict[tuple[Hashable, ...], ShapeCacheEntry] = (
            OrderedDict()
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._shapes) + len(self._key_tuples)

    def get(self, shape: ShapeKey) -> ShapeCacheEntry:
        with self._lock:
            if isinstance(shape, JSShape):
                return self._shapes.get(shape, UNKNOWN_ENTRY)
            entry = self._key_tuples.get(shape)
            if entry is None:
                return UNKNOWN_ENTRY
            self._key_tuples.move_to_end(shape)
            return entry

    def status(self, shape: ShapeKey) -> ShapeStatus:
        return self.get(shape).status

    def record(
        self,
        shape: ShapeKey,
        status: ShapeStatus,
        disqualification: Disqualification | None = None,
    ) -> None:
        """Store what is known about a shape."""
        if (status is ShapeStatus.Disqualified) != (disqualification is not None):
            raise ValueError(
                "A disqualification must be given for Disqualified status, "
                "and only for Disqualified status"
            )
        if isinstance(shape, JSShape) and shape.dictionary_mode:
            raise ValueError("Dictionary mode shapes cannot be cached")
        entry = ShapeCacheEntry(status, disqualification)
        with self._lock:
            if isinstance(shape, JSShape):
                self._shapes[shape] = entry
                return
            key_tuples = self._key_tuples
            key_tuples[shape] = entry
            key_tuples.move_to_end(shape)
            while len(key_tuples) > self.max_key_tuples:
                key_tuples.popitem(last=False)

    def invalidate(self, shape: ShapeKey) -> None:
        """Forget what is known about a shape."""
        with self._lock:
            if isinstance(shape, JSShape):
                self._shapes.pop(shape, None)
            else:
                self._key_tuples.pop(shape, None)

    def clear(self) -> None:
        with self._lock:
            self._shapes.clear()
            self._key_tuples.clear()


default_shape_cache: Final = ShapeCache()
"""The process-wide cache used by default."""
