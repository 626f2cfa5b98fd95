"""The state of a serialization call, shared by the fast path and its fallback."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.constants import Disqualification, EncodingWidth

if TYPE_CHECKING:
    from jsstringify.buffer import OutputBuffer
    from jsstringify.shapecache import ShapeKey


class TraversalState(Enum):
    """The next step of the fast path's traversal loop."""

    DescendInto = "descend-into"
    """Serialize the pending member: write a scalar or open a container."""
    AdvanceCursor = "advance-cursor"
    """Fetch the next member of the top container as the pending member."""
    Close = "close"
    """Write the top container's closing token and pop it."""
    Handoff = "handoff"
    """Stop, and let the general serializer finish from the pending member."""


@dataclass(eq=False, **slots_if310())
class WorkItem:
    """A container whose members are being written.

    `keys` is the snapshot of an object's keys taken when it was opened, or
    None for an array. `cursor` is the index of the next member to fetch, so
    the member being serialized is at `cursor - 1`. `written` counts members
    that have been written, which decides whether the next needs a comma.
    """

    container: object
    keys: Sequence[str] | None
    length: int
    parent: WorkItem | None = None
    shape: ShapeKey | None = None
    shape_trusted: bool = False
    keys_cacheable: bool = False
    cursor: int = 0
    written: int = 0

    @property
    def is_array(self) -> bool:
        return self.keys is None

    @property
    def closing_token(self) -> str:
        return "]" if self.keys is None else "}"

    def remaining_keys(self) -> Iterator[str | int]:
        """The keys (or indexes) of the members after the current one."""
        if self.keys is None:
            return iter(range(self.cursor, self.length))
        return iter(self.keys[self.cursor :])


@dataclass(eq=False, **slots_if310())
class SerializationTask:
    """The state of one top-level serialization.

    The open containers form a linked stack of `WorkItem`s, from `top` back to
    the root via `parent`. The pending member is the value that is being
    serialized next, with its key in the top container (`""` for the root).
    """

    root: object
    buffer: OutputBuffer
    finished_buffers: list[OutputBuffer] = field(default_factory=list)
    top: WorkItem | None = None
    depth: int = 0
    active: set[int] = field(default_factory=set)
    pending_key: str | int = ""
    pending_value: object = None
    used_fallback: bool = False
    disqualification: Disqualification | None = None
    undefined: bool = False

    def __post_init__(self) -> None:
        self.pending_value = self.root

    @property
    def width(self) -> EncodingWidth:
        return self.buffer.width

    @property
    def promoted(self) -> bool:
        return bool(self.finished_buffers)

    def push(self, item: WorkItem) -> None:
        item.parent = self.top
        self.top = item
        self.depth += 1
        self.active.add(id(item.container))

    def pop(self) -> WorkItem:
        item = self.top
        assert item is not None
        self.top = item.parent
        self.depth -= 1
        self.active.discard(id(item.container))
        return item

    def is_active(self, container: object) -> bool:
        return id(container) in self.active

    def frames(self) -> Iterator[WorkItem]:
        """The open containers, from the innermost to the root."""
        item = self.top
        while item is not None:
            yield item
            item = item.parent

    def switch_buffer(self, buffer: OutputBuffer) -> None:
        """Continue writing in a new buffer, keeping the current one as a prefix."""
        self.finished_buffers.append(self.buffer)
        self.buffer = buffer

    def finalize(self) -> str:
        """Get the text written by every buffer, in order."""
        return "".join(
            buffer.finalize() for buffer in [*self.finished_buffers, self.buffer]
        )
