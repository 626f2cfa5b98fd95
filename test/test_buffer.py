from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from jsstringify._errors import BufferFinalizedError
from jsstringify.buffer import OutputBuffer, Segment
from jsstringify.constants import DEFAULT_SEGMENT_SIZE, EncodingWidth


def test_segment() -> None:
    segment = Segment(4)

    assert segment.fill(memoryview(b"abcdef")) == 4
    assert segment.remaining == 0
    assert segment.capacity == 4
    assert segment.fill(memoryview(b"g")) == 0
    assert bytes(segment.view()) == b"abcd"


def test_output_buffer__defaults() -> None:
    buffer = OutputBuffer(EncodingWidth.NARROW)

    assert buffer.segment_size == DEFAULT_SEGMENT_SIZE
    assert len(buffer) == 0
    assert buffer.finalize() == ""


def test_output_buffer__appends_never_move_written_bytes() -> None:
    buffer = OutputBuffer(EncodingWidth.NARROW, segment_size=4)
    buffer.write("abc")
    first = buffer.segments[0]

    buffer.write("defghijkl")

    assert buffer.segments[0] is first
    assert [bytes(s.view()) for s in buffer.segments] == [b"abcd", b"efghijkl"]
    assert len(buffer) == 12
    assert buffer.finalize() == "abcdefghijkl"


def test_output_buffer__wide() -> None:
    buffer = OutputBuffer(EncodingWidth.WIDE, segment_size=3)
    buffer.write("a€")
    buffer.write("\ud800")

    assert len(buffer) == 6
    assert buffer.finalize() == "a€\ud800"


def test_output_buffer__narrow_rejects_wide_text() -> None:
    buffer = OutputBuffer(EncodingWidth.NARROW)

    with pytest.raises(UnicodeEncodeError):
        buffer.write("€")


def test_output_buffer__finalize_once() -> None:
    buffer = OutputBuffer(EncodingWidth.NARROW)
    buffer.write("x")
    assert buffer.finalize() == "x"

    with pytest.raises(BufferFinalizedError, match=r"already finalized"):
        buffer.finalize()
    with pytest.raises(BufferFinalizedError, match=r"Cannot append"):
        buffer.write("y")


def test_output_buffer__rejects_invalid_segment_size() -> None:
    with pytest.raises(ValueError, match=r"segment_size must be positive"):
        OutputBuffer(EncodingWidth.NARROW, segment_size=0)


@given(
    parts=st.lists(st.text(alphabet=st.characters(max_codepoint=0xFF))),
    segment_size=st.integers(min_value=1, max_value=16),
)
def test_output_buffer__holds_written_text(parts: list[str], segment_size: int) -> None:
    buffer = OutputBuffer(EncodingWidth.NARROW, segment_size=segment_size)
    for part in parts:
        buffer.write(part)

    assert all(s.capacity >= segment_size for s in buffer.segments)
    assert buffer.finalize() == "".join(parts)
