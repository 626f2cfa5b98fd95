from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from jsstringify.jstypes import JSConsString


def test_concatenation() -> None:
    s = "a" + JSConsString("b", "c") + "d"

    assert isinstance(s, JSConsString)
    assert s.flatten() == "abcd"
    assert str(s) == "abcd"
    assert len(s) == 4


def test_deep_trees_do_not_recurse() -> None:
    s: str | JSConsString = ""
    for _ in range(10_000):
        s = JSConsString(s, "x")

    assert isinstance(s, JSConsString)
    assert len(s) == 10_000
    assert s.flatten() == "x" * 10_000


@given(parts=st.lists(st.text(), min_size=2))
def test_flatten_joins_parts_in_order(parts: list[str]) -> None:
    s = JSConsString(parts[0], parts[1])
    for part in parts[2:]:
        s = s + part

    assert s.flatten() == "".join(parts)
