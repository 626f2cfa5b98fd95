from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

import pytest

from jsstringify._errors import (
    CircularStructureStringifyError,
    UnhandledValueStringifyError,
    UnserializableValueStringifyError,
)
from jsstringify.general import DefaultGeneralSerializer, Space
from jsstringify.jstypes import (
    JSArray,
    JSBigInt,
    JSConsString,
    JSHole,
    JSObject,
    JSSymbol,
    JSUndefined,
)
from jsstringify.task import WorkItem


@pytest.fixture
def serializer() -> DefaultGeneralSerializer:
    return DefaultGeneralSerializer()


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (-0.0, "0"),
        (1e21, "1e+21"),
        (math.nan, "null"),
        (math.inf, "null"),
        ("a\nb", '"a\\nb"'),
        (JSConsString("a", "b"), '"ab"'),
        ([], "[]"),
        ({}, "{}"),
        ((1, "x"), '[1,"x"]'),
        ([JSUndefined, JSSymbol(), len, JSHole], "[null,null,null,null]"),
        ({"u": JSUndefined, "s": JSSymbol(), "f": len, "k": 1}, '{"k":1}'),
        (JSArray([1, JSHole, 3]), "[1,null,3]"),
        (JSObject({2: "b", 1: "a"}, x=0), '{"1":"a","2":"b","x":0}'),
        ({"b": 1, 2: "x", "a": 3, "0": "y"}, '{"0":"y","2":"x","b":1,"a":3}'),
        ({1.5: "x", True: "t"}, '{"1.5":"x","true":"t"}'),
    ],
)
def test_serialize(
    serializer: DefaultGeneralSerializer, value: object, expected: str
) -> None:
    assert serializer.serialize(value) == expected


@pytest.mark.parametrize("value", [JSUndefined, JSSymbol("x"), print])
def test_serialize__undefined_root(
    serializer: DefaultGeneralSerializer, value: object
) -> None:
    assert serializer.serialize(value) is JSUndefined


@pytest.mark.parametrize(
    "space, expected_gap",
    [
        (None, ""),
        (0, ""),
        (0.5, ""),
        (-3, ""),
        (math.nan, ""),
        (True, ""),
        (1, " "),
        (2.9, "  "),
        (10, " " * 10),
        (100, " " * 10),
        (math.inf, " " * 10),
        ("\t", "\t"),
        ("", ""),
        ("abcdefghijklmnop", "abcdefghij"),
        (JSConsString("--", "--"), "----"),
    ],
)
def test_serialize__space(
    serializer: DefaultGeneralSerializer, space: Space, expected_gap: str
) -> None:
    value = {"a": [1, {}], "b": []}

    text = serializer.serialize(value, space=space)

    if expected_gap:
        g = expected_gap
        assert text == (
            f'{{\n{g}"a": [\n{g}{g}1,\n{g}{g}{{}}\n{g}],\n{g}"b": []\n}}'
        )
    else:
        assert text == '{"a":[1,{}],"b":[]}'


def test_serialize__replacer_function(serializer: DefaultGeneralSerializer) -> None:
    calls: list[tuple[object, str, object]] = []

    def replacer(holder: Any, key: str, value: object) -> object:
        calls.append((holder, key, value))
        if key == "secret":
            return JSUndefined
        if isinstance(value, int):
            return value * 10
        return value

    value = {"n": 1, "secret": "x", "list": [2]}

    assert serializer.serialize(value, replacer=replacer) == (
        '{"n":10,"list":[20]}'
    )
    root_holder = calls[0][0]
    assert root_holder == JSObject({"": value})
    assert root_holder.prototype is not None
    assert [(key, v) for _, key, v in calls] == [
        ("", value),
        ("n", 1),
        ("secret", "x"),
        ("list", [2]),
        ("0", 2),
    ]
    assert calls[1][0] is value
    assert calls[4][0] is value["list"]


def test_serialize__replacer_function_sees_to_json_result(
    serializer: DefaultGeneralSerializer,
) -> None:
    when = datetime(2024, 1, 2, tzinfo=timezone.utc)
    seen: list[object] = []

    def replacer(holder: Any, key: str, value: object) -> object:
        seen.append(value)
        return value

    assert serializer.serialize([when], replacer=replacer) == (
        '["2024-01-02T00:00:00.000Z"]'
    )
    assert seen[1] == "2024-01-02T00:00:00.000Z"


def test_serialize__replacer_list(serializer: DefaultGeneralSerializer) -> None:
    value = {"a": 1, 1: "one", "b": 2, "nested": {"a": 3, "c": 4}}
    replacer = ["a", 1, 1.0, "a", True, None, JSConsString("nes", "ted"), {}]

    assert serializer.serialize(value, replacer=replacer) == (
        '{"a":1,"1":"one","nested":{"a":3}}'
    )
    assert serializer.serialize(value, replacer=JSArray(["b"])) == '{"b":2}'
    assert serializer.serialize([{"a": 1, "b": 2}], replacer=["b"]) == '[{"b":2}]'


def test_serialize__replacer_list_keeps_missing_keys_out(
    serializer: DefaultGeneralSerializer,
) -> None:
    assert serializer.serialize({"a": 1}, replacer=["missing", "a"]) == '{"a":1}'


def test_serialize__ignores_other_replacers(
    serializer: DefaultGeneralSerializer,
) -> None:
    not_a_list: Any = "a"
    mapping: Any = {"a": 1}

    assert serializer.serialize({"a": 1}, replacer=not_a_list) == '{"a":1}'
    assert serializer.serialize({"a": 1}, replacer=mapping) == '{"a":1}'


def test_serialize__to_json(serializer: DefaultGeneralSerializer) -> None:
    keys: list[str] = []

    def to_json(this: object, key: str) -> object:
        keys.append(key)
        return {"from": key}

    value = [JSObject(toJSON=to_json), {"k": {"toJSON": to_json}}]

    assert serializer.serialize(value) == '[{"from":"0"},{"k":{"from":"k"}}]'
    assert keys == ["0", "k"]
    assert serializer.serialize({"toJSON": "not callable"}) == (
        '{"toJSON":"not callable"}'
    )


def test_serialize__dates(serializer: DefaultGeneralSerializer) -> None:
    when = datetime(2000, 2, 29, 12, 0, 0, 500000, timezone.utc)

    assert serializer.serialize({"when": when}) == (
        '{"when":"2000-02-29T12:00:00.500Z"}'
    )


def test_serialize__getters(serializer: DefaultGeneralSerializer) -> None:
    obj = JSObject(a=1)
    obj.define_property("double", get=lambda this: this["a"] * 2)
    obj.define_property("hidden", get=lambda this: 0, enumerable=False)

    assert serializer.serialize(obj) == '{"a":1,"double":2}'


def test_serialize__prototype_properties_are_not_own(
    serializer: DefaultGeneralSerializer,
) -> None:
    obj = JSObject.create(JSObject(inherited=1), own=2)

    assert serializer.serialize(obj) == '{"own":2}'


def test_serialize__well_formed_strings() -> None:
    assert DefaultGeneralSerializer().serialize(["\ud800"]) == '["\\ud800"]'
    assert DefaultGeneralSerializer(well_formed=False).serialize(["\ud800"]) == (
        '["\ud800"]'
    )


def test_serialize__cycles(serializer: DefaultGeneralSerializer) -> None:
    value: list[object] = [1]
    value.append({"back": value})

    with pytest.raises(CircularStructureStringifyError) as exc_info:
        serializer.serialize(value)
    assert exc_info.value.value is value


def test_serialize__repeated_references_are_not_cycles(
    serializer: DefaultGeneralSerializer,
) -> None:
    shared = {"x": 1}

    assert serializer.serialize([shared, shared]) == '[{"x":1},{"x":1}]'


def test_serialize__cycle_through_to_json(
    serializer: DefaultGeneralSerializer,
) -> None:
    value: dict[str, object] = {}
    value["self"] = JSObject(toJSON=lambda this, key: value)

    with pytest.raises(CircularStructureStringifyError):
        serializer.serialize(value)


def test_serialize__bigint(serializer: DefaultGeneralSerializer) -> None:
    with pytest.raises(UnserializableValueStringifyError, match="BigInt") as exc_info:
        serializer.serialize({"n": JSBigInt(1)})
    assert exc_info.value.value == JSBigInt(1)

    def bigint_to_str(holder: Any, key: str, value: object) -> object:
        return str(int(value)) if isinstance(value, JSBigInt) else value

    assert serializer.serialize({"n": JSBigInt(1)}, replacer=bigint_to_str) == (
        '{"n":"1"}'
    )


def test_serialize__unhandled_values(serializer: DefaultGeneralSerializer) -> None:
    unhandled = object()

    with pytest.raises(UnhandledValueStringifyError) as exc_info:
        serializer.serialize([unhandled])
    assert exc_info.value.value is unhandled

    with pytest.raises(UnhandledValueStringifyError):
        serializer.serialize({1j: "complex key"})


@pytest.mark.parametrize("role", ["toJSON", "Getter", "Replacer"])
def test_serialize__user_errors_get_notes(
    serializer: DefaultGeneralSerializer, role: str
) -> None:
    def fail(*args: object) -> object:
        raise ValueError("nope")

    def fail_on_p(holder: Any, key: str, value: object) -> object:
        return fail() if key == "p" else value

    obj = JSObject()
    replacer = None
    if role == "toJSON":
        obj["p"] = JSObject(toJSON=fail)
    elif role == "Getter":
        obj.define_property("p", get=fail)
    else:
        obj["p"] = 1
        replacer = fail_on_p

    with pytest.raises(ValueError, match="nope") as exc_info:
        serializer.serialize(obj, replacer=replacer)
    assert exc_info.value.__notes__ == [
        f"{role} raised while serializing property 'p'"
    ]


def test_resume__root_only(serializer: DefaultGeneralSerializer) -> None:
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert serializer.resume("", when, []) == '"2024-01-01T00:00:00.000Z"'
    assert serializer.resume("", JSUndefined, []) is JSUndefined


def test_resume__finishes_open_containers(
    serializer: DefaultGeneralSerializer,
) -> None:
    when = datetime(2024, 1, 1, tzinfo=timezone.utc)
    inner = [1, when, JSUndefined, 3]
    outer = {"x": inner, "gone": JSUndefined, "y": {"z": 2}}
    # The text written so far is '{"x":[1,' and the pending value is `when`.
    outer_frame = WorkItem(outer, ["x", "gone", "y"], 3, cursor=1, written=1)
    inner_frame = WorkItem(inner, None, 4, cursor=2, written=1)

    text = serializer.resume(1, when, [inner_frame, outer_frame])

    assert text == ',"2024-01-01T00:00:00.000Z",null,3],"y":{"z":2}}'


def test_resume__first_member_has_no_comma(
    serializer: DefaultGeneralSerializer,
) -> None:
    value = {"a": JSUndefined, "b": 1}
    frame = WorkItem(value, ["a", "b"], 2, cursor=1, written=0)

    assert serializer.resume("a", JSUndefined, [frame]) == '"b":1}'


def test_resume__detects_cycles_through_open_containers(
    serializer: DefaultGeneralSerializer,
) -> None:
    outer: list[object] = []
    inner = {"back": outer}
    outer.append(inner)
    outer_frame = WorkItem(outer, None, 1, cursor=1, written=1)
    inner_frame = WorkItem(inner, ["back"], 1, cursor=1, written=0)

    with pytest.raises(CircularStructureStringifyError) as exc_info:
        serializer.resume("back", outer, [inner_frame, outer_frame])
    assert exc_info.value.value is outer
