from __future__ import annotations

import threading

import pytest

from jsstringify.jstypes import JSObject, JSShape, JSSymbol, PropertyAttributes
from jsstringify.jstypes.jsshape import DEFAULT_ATTRIBUTES


def test_root() -> None:
    proto = JSObject()

    assert JSShape.root(None) is JSShape.root(None)
    assert JSShape.root(proto) is JSShape.root(proto)
    assert JSShape.root(proto) is not JSShape.root(JSObject())
    assert JSShape.root(proto).prototype is proto
    assert len(JSShape.root(proto)) == 0


def test_with_property__transitions_are_interned() -> None:
    root = JSShape.root(JSObject())
    a = root.with_property("a", DEFAULT_ATTRIBUTES)

    assert a is root.with_property("a", DEFAULT_ATTRIBUTES)
    assert a is not root.with_property("a", PropertyAttributes.Accessor)
    assert a.with_property("b", DEFAULT_ATTRIBUTES).keys == ("a", "b")
    assert "a" in a
    assert "b" not in a
    assert a.attributes_of("a") is DEFAULT_ATTRIBUTES
    assert a.attributes_of("b") is None


def test_with_property__rejects_existing_keys() -> None:
    shape = JSShape.root(None).with_property("a", DEFAULT_ATTRIBUTES)

    with pytest.raises(ValueError, match=r"already has a property 'a'"):
        shape.with_property("a", DEFAULT_ATTRIBUTES)


def test_with_property__symbols() -> None:
    symbol = JSSymbol("s")
    shape = JSShape.root(None).with_property(symbol, DEFAULT_ATTRIBUTES)

    assert shape.keys == (symbol,)
    assert shape is JSShape.root(None).with_property(symbol, DEFAULT_ATTRIBUTES)
    assert shape is not JSShape.root(None).with_property(
        JSSymbol("s"), DEFAULT_ATTRIBUTES
    )


def test_dictionary_mode() -> None:
    ab = (
        JSShape.root(None)
        .with_property("a", DEFAULT_ATTRIBUTES)
        .with_property("b", DEFAULT_ATTRIBUTES)
    )

    without_a = ab.without_property("a")
    assert without_a.dictionary_mode
    assert without_a.keys == ("b",)
    assert without_a is not ab.without_property("a")

    hidden = ab.with_attributes("b", PropertyAttributes(0))
    assert hidden.dictionary_mode
    assert hidden.attributes == (DEFAULT_ATTRIBUTES, PropertyAttributes(0))

    extended = without_a.with_property("c", DEFAULT_ATTRIBUTES)
    assert extended.dictionary_mode
    assert extended is not without_a.with_property("c", DEFAULT_ATTRIBUTES)
    assert repr(extended) == "JSShape(keys=('b', 'c'), dictionary_mode=True)"


def test_with_prototype() -> None:
    proto = JSObject()
    shape = JSShape.root(None).with_property("a", DEFAULT_ATTRIBUTES)

    moved = shape.with_prototype(proto)

    assert moved.prototype is proto
    assert moved is JSShape.root(proto).with_property("a", DEFAULT_ATTRIBUTES)


def test_init__validates_lengths() -> None:
    with pytest.raises(ValueError, match=r"same length"):
        JSShape(None, ("a",), ())


def test_transitions_are_thread_safe() -> None:
    root = JSShape.root(JSObject())
    results: list[JSShape] = []
    barrier = threading.Barrier(8)

    def add_property() -> None:
        barrier.wait()
        results.append(root.with_property("x", DEFAULT_ATTRIBUTES))

    threads = [threading.Thread(target=add_property) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert all(shape is results[0] for shape in results)
