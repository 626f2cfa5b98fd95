"""The complete JSON.stringify algorithm, which handles any value.

This implements [SerializeJSONProperty] and the algorithms it uses, including
the parts that run user code: `toJSON` methods, getters and `replacer`
functions. The fast path uses it to serialize values it can't handle itself,
and to finish a traversal it has handed off part-way through.

[SerializeJSONProperty]: https://tc39.es/ecma262/#sec-serializejsonproperty
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Final, Protocol

from jsstringify._errors import (
    CircularStructureStringifyError,
    UnhandledValueStringifyError,
    UnserializableValueStringifyError,
)
from jsstringify._pycompat.exceptions import add_note
from jsstringify.constants import SPACE_MAX_LENGTH
from jsstringify.jstypes.jsbigint import JSBigInt
from jsstringify.jstypes.jsconsstring import JSConsString
from jsstringify.jstypes.jshole import JSHole
from jsstringify.jstypes.jsobject import JSObject
from jsstringify.jstypes.jssymbol import JSSymbol
from jsstringify.jstypes.jsundefined import JSUndefined, JSUndefinedType
from jsstringify.number_format import format_number, number_to_json
from jsstringify.properties import (
    PropertyEnumerationProvider,
    default_property_provider,
)
from jsstringify.scanner import quote

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

    from jsstringify.task import WorkItem

ReplacerFn: TypeAlias = "Callable[[Any, str, Any], object]"
"""A replacer function, called as `replacer(holder, key, value)`."""
Replacer: TypeAlias = "ReplacerFn | Sequence[object] | None"
"""A replacer function, an array of the property names to include, or None."""
Space: TypeAlias = "int | float | str | JSConsString | None"
"""The indentation: a number of spaces, the indent text, or None."""

CIRCULAR_STRUCTURE_MESSAGE: Final = "Converting circular structure to JSON"


class GeneralSerializer(Protocol):
    """A JSON serializer that handles every value, and can finish a fast path."""

    def serialize(
        self, value: object, *, replacer: Replacer = None, space: Space = None
    ) -> str | JSUndefinedType:
        """Serialize a value, like `JSON.stringify(value, replacer, space)`."""

    def resume(
        self,
        pending_key: str | int,
        pending_value: object,
        frames: Sequence[WorkItem],
    ) -> str | JSUndefinedType:
        """Finish a traversal that the fast path suspended.

        The returned text continues the fast path's output: the pending member
        (without a leading comma if it's the first member of its container),
        then the remaining members and the closing token of each frame, from
        the innermost to the root.

        Arguments
        ---------
        pending_key
            The key (or array index) of the pending value in the innermost
            frame.
        pending_value
            The value that the fast path had fetched but not written.
        frames
            The open containers, innermost first. The result is `JSUndefined`
            only if there are no frames and the pending value is undefined.
        """


@dataclass
class _State:
    replacer_function: ReplacerFn | None = None
    property_list: list[str] | None = None
    gap: str = ""
    indent: str = ""
    stack: list[object] = field(default_factory=list)
    active: set[int] = field(default_factory=set)


_READ: Final = object()


@dataclass(init=False)
class DefaultGeneralSerializer(GeneralSerializer):
    """Serializes values with the ECMAScript JSON.stringify algorithm.

    Examples
    --------
    >>> serializer = DefaultGeneralSerializer()
    >>> serializer.serialize({"b": [1, None], "a": "x"}, space=2)
    '{\\n  "b": [\\n    1,\\n    null\\n  ],\\n  "a": "x"\\n}'
    >>> serializer.serialize({"keep": 1, "drop": 2}, replacer=["keep"])
    '{"keep":1}'
    """

    provider: PropertyEnumerationProvider
    well_formed: bool

    def __init__(
        self,
        *,
        provider: PropertyEnumerationProvider | None = None,
        well_formed: bool = True,
    ) -> None:
        self.provider = default_property_provider if provider is None else provider
        self.well_formed = well_formed

    def serialize(
        self, value: object, *, replacer: Replacer = None, space: Space = None
    ) -> str | JSUndefinedType:
        state = _State(gap=self._gap(space))
        holder: object = None
        if callable(replacer):
            state.replacer_function = replacer
            holder = JSObject({"": value})
        elif replacer is not None and self.provider.is_array(replacer):
            state.property_list = self._property_list(replacer)

        text = self._serialize_property(state, "", holder, value)
        return JSUndefined if text is None else text

    def resume(
        self,
        pending_key: str | int,
        pending_value: object,
        frames: Sequence[WorkItem],
    ) -> str | JSUndefinedType:
        state = _State()
        if not frames:
            text = self._serialize_property(state, pending_key, None, pending_value)
            return JSUndefined if text is None else text

        for frame in reversed(frames):
            self._enter(state, frame.container)

        parts: list[str] = []
        for depth, frame in enumerate(frames):
            container = frame.container
            written = frame.written
            if depth == 0:
                text = self._serialize_property(
                    state, pending_key, container, pending_value
                )
                written = self._append_member(parts, frame, pending_key, text, written)
            for key in frame.remaining_keys():
                text = self._serialize_property(state, key, container)
                written = self._append_member(parts, frame, key, text, written)
            parts.append(frame.closing_token)
            self._leave(state, container)
        return "".join(parts)

    def _append_member(
        self,
        parts: list[str],
        frame: WorkItem,
        key: str | int,
        text: str | None,
        written: int,
    ) -> int:
        if text is None:
            if not frame.is_array:
                return written
            text = "null"
        if written:
            parts.append(",")
        if not frame.is_array:
            parts.append(f"{self._quote(str(key))}:")
        parts.append(text)
        return written + 1

    def _quote(self, value: str) -> str:
        return quote(value, well_formed=self.well_formed)

    def _gap(self, space: Space) -> str:
        if isinstance(space, (int, float)) and not isinstance(space, bool):
            if math.isnan(space) or space < 1:
                return ""
            width = SPACE_MAX_LENGTH if math.isinf(space) else int(space)
            return " " * max(0, min(SPACE_MAX_LENGTH, width))
        if isinstance(space, JSConsString):
            space = space.flatten()
        if isinstance(space, str):
            return str.__str__(space)[:SPACE_MAX_LENGTH]
        return ""

    def _property_list(self, replacer: object) -> list[str]:
        property_list: list[str] = []
        for index in range(self.provider.array_length(replacer)):
            element = self.provider.get(replacer, index)
            item: str | None = None
            if isinstance(element, JSConsString):
                item = element.flatten()
            elif isinstance(element, str):
                item = str.__str__(element)
            elif isinstance(element, (int, float)) and not isinstance(element, bool):
                item = format_number(element)
            if item is not None and item not in property_list:
                property_list.append(item)
        return property_list

    def _call(
        self, fn: Callable[..., object], *args: object, role: str, key: str | int
    ) -> object:
        try:
            return fn(*args)
        except Exception as e:
            add_note(e, f"{role} raised while serializing property {str(key)!r}")
            raise

    def _serialize_property(
        self,
        state: _State,
        key: str | int,
        holder: object,
        value: object = _READ,
    ) -> str | None:
        """Get the JSON text of a property, or None if it is undefined."""
        provider = self.provider
        if value is _READ:
            value = self._call(provider.get, holder, key, role="Getter", key=key)

        to_json = provider.lookup_to_json(value)
        if to_json is not None:
            value = self._call(to_json, value, str(key), role="toJSON", key=key)
        if state.replacer_function is not None:
            value = self._call(
                state.replacer_function,
                holder,
                str(key),
                value,
                role="Replacer",
                key=key,
            )

        if isinstance(value, JSConsString):
            value = value.flatten()

        if value is None:
            return "null"
        if value is True:
            return "true"
        if value is False:
            return "false"
        if isinstance(value, str):
            return self._quote(str.__str__(value))
        if isinstance(value, (int, float)):
            return number_to_json(value)
        if isinstance(value, JSBigInt):
            raise UnserializableValueStringifyError(
                "Do not know how to serialize a BigInt", value=value
            )
        if value is JSUndefined or value is JSHole or isinstance(value, JSSymbol):
            return None
        if provider.is_array(value):
            return self._serialize_array(state, value)
        if provider.is_object(value):
            return self._serialize_object(state, value)
        if callable(value):
            return None
        raise UnhandledValueStringifyError(
            "Value has no JavaScript equivalent that JSON can represent",
            value=value,
        )

    def _enter(self, state: _State, value: object) -> None:
        if id(value) in state.active:
            raise CircularStructureStringifyError(
                CIRCULAR_STRUCTURE_MESSAGE, value=value
            )
        state.active.add(id(value))
        state.stack.append(value)

    def _leave(self, state: _State, value: object) -> None:
        assert state.stack[-1] is value
        state.stack.pop()
        state.active.discard(id(value))

    def _serialize_object(self, state: _State, value: object) -> str:
        self._enter(state, value)
        stepback = state.indent
        state.indent += state.gap

        if state.property_list is not None:
            keys = state.property_list
        else:
            keys = self.provider.own_enumerable_keys(value)
        separator = ": " if state.gap else ":"
        partial: list[str] = []
        for key in keys:
            text = self._serialize_property(state, key, value)
            if text is not None:
                partial.append(f"{self._quote(key)}{separator}{text}")

        result = self._join(state, partial, "{", "}", stepback)
        state.indent = stepback
        self._leave(state, value)
        return result

    def _serialize_array(self, state: _State, value: object) -> str:
        self._enter(state, value)
        stepback = state.indent
        state.indent += state.gap

        partial: list[str] = []
        for index in range(self.provider.array_length(value)):
            text = self._serialize_property(state, index, value)
            partial.append("null" if text is None else text)

        result = self._join(state, partial, "[", "]", stepback)
        state.indent = stepback
        self._leave(state, value)
        return result

    def _join(
        self,
        state: _State,
        partial: list[str],
        opening: str,
        closing: str,
        stepback: str,
    ) -> str:
        if not partial:
            return f"{opening}{closing}"
        if not state.gap:
            return f"{opening}{','.join(partial)}{closing}"
        separator = f",\n{state.indent}"
        body = separator.join(partial)
        return f"{opening}\n{state.indent}{body}\n{stepback}{closing}"
