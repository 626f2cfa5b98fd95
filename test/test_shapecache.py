from __future__ import annotations

import gc
import threading

import pytest

from jsstringify.constants import Disqualification
from jsstringify.jstypes import JSObject
from jsstringify.shapecache import (
    UNKNOWN_ENTRY,
    ShapeCache,
    ShapeCacheEntry,
    ShapeStatus,
    default_shape_cache,
)


def test_get__unknown_shapes(shape_cache: ShapeCache) -> None:
    assert shape_cache.get(("a",)) is UNKNOWN_ENTRY
    assert shape_cache.get(JSObject(a=1).shape) is UNKNOWN_ENTRY
    assert shape_cache.status(()) is ShapeStatus.Unknown


def test_record(shape_cache: ShapeCache) -> None:
    shape = JSObject(a=1).shape
    shape_cache.record(shape, ShapeStatus.FastJsonIterable)
    shape_cache.record(
        ("toJSON",), ShapeStatus.Disqualified, Disqualification.CustomToJSON
    )

    assert shape_cache.status(JSObject(a=2).shape) is ShapeStatus.FastJsonIterable
    assert shape_cache.get(("toJSON",)) == ShapeCacheEntry(
        ShapeStatus.Disqualified, Disqualification.CustomToJSON
    )
    assert len(shape_cache) == 2

    shape_cache.record(shape, ShapeStatus.NeedsKeyScan)
    assert shape_cache.status(shape) is ShapeStatus.NeedsKeyScan
    assert len(shape_cache) == 2


def test_record__validates_disqualification(shape_cache: ShapeCache) -> None:
    with pytest.raises(ValueError, match=r"A disqualification must be given"):
        shape_cache.record(("a",), ShapeStatus.Disqualified)
    with pytest.raises(ValueError, match=r"A disqualification must be given"):
        shape_cache.record(
            ("a",), ShapeStatus.FastJsonIterable, Disqualification.SymbolKey
        )


def test_record__rejects_dictionary_mode_shapes(shape_cache: ShapeCache) -> None:
    obj = JSObject(a=1, b=2)
    del obj["a"]

    with pytest.raises(ValueError, match=r"Dictionary mode shapes cannot be cached"):
        shape_cache.record(obj.shape, ShapeStatus.FastJsonIterable)


def test_key_tuples_are_least_recently_used() -> None:
    cache = ShapeCache(max_key_tuples=2)
    cache.record(("a",), ShapeStatus.FastJsonIterable)
    cache.record(("b",), ShapeStatus.FastJsonIterable)
    cache.get(("a",))
    cache.record(("c",), ShapeStatus.NeedsKeyScan)

    assert cache.status(("a",)) is ShapeStatus.FastJsonIterable
    assert cache.status(("b",)) is ShapeStatus.Unknown
    assert cache.status(("c",)) is ShapeStatus.NeedsKeyScan
    assert len(cache) == 2


def test_shapes_are_held_weakly(shape_cache: ShapeCache) -> None:
    proto = JSObject()
    obj = JSObject.create(proto, a=1)
    shape_cache.record(obj.shape, ShapeStatus.FastJsonIterable)
    assert len(shape_cache) == 1

    del proto, obj
    gc.collect()

    assert len(shape_cache) == 0


def test_invalidate_and_clear(shape_cache: ShapeCache) -> None:
    shape = JSObject(a=1).shape
    shape_cache.record(shape, ShapeStatus.FastJsonIterable)
    shape_cache.record(("a",), ShapeStatus.FastJsonIterable)

    shape_cache.invalidate(shape)
    shape_cache.invalidate(("missing",))
    assert shape_cache.status(shape) is ShapeStatus.Unknown
    assert len(shape_cache) == 1

    shape_cache.clear()
    assert len(shape_cache) == 0


def test_concurrent_records() -> None:
    cache = ShapeCache(max_key_tuples=64)
    barrier = threading.Barrier(8)

    def record(thread: int) -> None:
        barrier.wait()
        for i in range(200):
            cache.record((f"{thread}-{i}",), ShapeStatus.FastJsonIterable)
            cache.get((f"{thread}-{i // 2}",))

    threads = [threading.Thread(target=record, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 64


def test_default_shape_cache() -> None:
    assert isinstance(default_shape_cache, ShapeCache)
