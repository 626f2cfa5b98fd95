from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jsstringify._errors import BufferFinalizedError
from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.constants import DEFAULT_SEGMENT_SIZE, EncodingWidth

if TYPE_CHECKING:
    from typing_extensions import Buffer


@dataclass(init=False, **slots_if310())
class Segment:
    """A fixed-capacity block of output bytes.

    A segment's `bytearray` is allocated at its full capacity and never
    resized; `used` counts the bytes written so far.
    """

    data: bytearray
    used: int

    def __init__(self, capacity: int) -> None:
        self.data = bytearray(capacity)
        self.used = 0

    @property
    def capacity(self) -> int:
        return len(self.data)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.used

    def fill(self, data: memoryview) -> int:
        """Copy as much of data as fits, and return the number of bytes copied."""
        count = min(len(data), len(self.data) - self.used)
        used = self.used
        self.data[used : used + count] = data[:count]
        self.used = used + count
        return count

    def view(self) -> memoryview:
        """A view of the written bytes."""
        return memoryview(self.data)[: self.used]


@dataclass(init=False)
class OutputBuffer:
    """
    An append-only sequence of fixed-size segments holding encoded text.

    Appending never moves bytes that were already written: when the tail
    segment is full, a new segment is added and the rest of the data goes there.
    The segments are concatenated exactly once, by `finalize()`.

    Buffers are specialised for an encoding width: narrow buffers hold Latin-1
    bytes (one per character), wide buffers hold UTF-16-LE code units.

    Examples
    --------
    >>> buffer = OutputBuffer(EncodingWidth.NARROW, segment_size=4)
    >>> buffer.write('{"a":')
    >>> buffer.write('"é"}')
    >>> len(buffer.segments)
    3
    >>> buffer.finalize()
    '{"a":"é"}'
    """

    width: EncodingWidth
    segment_size: int
    segments: list[Segment] = field(default_factory=list)
    finalized: bool = False

    def __init__(
        self, width: EncodingWidth, segment_size: int = DEFAULT_SEGMENT_SIZE
    ) -> None:
        if segment_size < 1:
            raise ValueError(f"segment_size must be positive: {segment_size}")
        self.width = width
        self.segment_size = segment_size
        self.segments = [Segment(segment_size)]
        self.finalized = False

    def __len__(self) -> int:
        """The number of bytes written."""
        return sum(segment.used for segment in self.segments)

    def append(self, data: Buffer) -> None:
        """Append encoded bytes.

        The caller is responsible for data being encoded at the buffer's width.
        """
        if self.finalized:
            raise BufferFinalizedError("Cannot append to a finalized OutputBuffer")
        remaining = memoryview(data).cast("B")
        tail = self.segments[-1]
        copied = tail.fill(remaining)
        if copied < len(remaining):
            remaining = remaining[copied:]
            segment = Segment(max(self.segment_size, len(remaining)))
            segment.fill(remaining)
            self.segments.append(segment)

    def write(self, text: str) -> None:
        """Encode text at the buffer's width and append it."""
        self.append(self.width.encode(text))

    def finalize(self) -> str:
        """Concatenate the segments and decode them as text.

        A buffer can only be finalized once. Afterwards it can no longer be
        appended to.
        """
        if self.finalized:
            raise BufferFinalizedError("OutputBuffer is already finalized")
        self.finalized = True
        data = b"".join(segment.view() for segment in self.segments)
        return self.width.decode(data)
