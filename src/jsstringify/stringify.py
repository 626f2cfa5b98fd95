from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Final

from packaging.version import Version

from jsstringify._errors import CircularStructureStringifyError
from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.buffer import OutputBuffer
from jsstringify.constants import (
    DEFAULT_SEGMENT_SIZE,
    Disqualification,
    EncodingWidth,
    StringifyFeature,
)
from jsstringify.general import (
    CIRCULAR_STRUCTURE_MESSAGE,
    DefaultGeneralSerializer,
    GeneralSerializer,
)
from jsstringify.jstypes.jsarray import JSArray
from jsstringify.jstypes.jsconsstring import JSConsString
from jsstringify.jstypes.jshole import JSHole
from jsstringify.jstypes.jsobject import JSObject
from jsstringify.jstypes.jssymbol import JSSymbol
from jsstringify.jstypes.jsundefined import JSUndefined, JSUndefinedType
from jsstringify.number_format import number_to_json
from jsstringify.properties import (
    PropertyEnumerationProvider,
    default_property_provider,
)
from jsstringify.scanner import ScanResult, scan
from jsstringify.shapecache import (
    UNKNOWN_ENTRY,
    ShapeCache,
    ShapeStatus,
    default_shape_cache,
)
from jsstringify.task import SerializationTask, TraversalState, WorkItem

if TYPE_CHECKING:
    from jsstringify.general import Replacer, Space

logger = logging.getLogger(__name__)

# Key tuples compare equal to tuples of other key types (a str subclass equals
# the plain str), so these reasons are not properties of a key tuple.
_KEY_TYPE_DISQUALIFICATIONS: Final = frozenset(
    {Disqualification.NonFlatString, Disqualification.NonStringKey}
)


@dataclass(frozen=True, **slots_if310())
class StringifyResult:
    """The output of [`Stringifier.serialize()`](`jsstringify.Stringifier.serialize`).

    `text` is the JSON text, or `JSUndefined` if the value has no JSON
    representation. `used_fallback` is true if any part of the text was written
    by the general serializer, in which case `disqualification` is the reason.
    `promoted` is true if the fast path switched to wide encoding.
    """

    text: str | JSUndefinedType
    used_fallback: bool
    disqualification: Disqualification | None = None
    promoted: bool = False


def _is_plain_narrow_key(key: str) -> bool:
    result = scan(key)
    return not result.needs_escaping and result.width is EncodingWidth.NARROW


class _FastPathTraversal:
    """The fast path's traversal loop, writing at one encoding width.

    The traversal never runs user code. When it meets a value it can't
    serialize without doing so, it stops in the `Handoff` state, leaving the
    value as the task's pending member and the open containers on the task's
    stack, for the general serializer to finish.
    """

    width: ClassVar[EncodingWidth]

    def __init__(
        self,
        task: SerializationTask,
        *,
        provider: PropertyEnumerationProvider,
        shape_cache: ShapeCache,
        well_formed: bool,
    ) -> None:
        assert task.width is self.width
        self.task = task
        self.provider = provider
        self.shape_cache = shape_cache
        self.well_formed = well_formed

    def accepts(self, result: ScanResult) -> bool:
        """Check if a scanned string can be written at this width."""
        raise NotImplementedError

    def run(self, state: TraversalState) -> TraversalState | None:
        """Traverse until the value is complete or can't be continued.

        Returns None when the whole value has been written, `Handoff` when the
        general serializer must finish it, or `DescendInto` when the pending
        member needs a wider encoding than this traversal writes.
        """
        task = self.task
        provider = self.provider
        while True:
            if state is TraversalState.AdvanceCursor:
                top = task.top
                if top is None:
                    return None
                if top.cursor >= top.length:
                    state = TraversalState.Close
                    continue
                index = top.cursor
                top.cursor = index + 1
                key = index if top.keys is None else top.keys[index]
                task.pending_key = key
                task.pending_value = provider.read_member(top.container, key)
                state = TraversalState.DescendInto
            elif state is TraversalState.DescendInto:
                next_state = self.descend_into()
                if next_state is None:
                    return TraversalState.DescendInto
                state = next_state
            elif state is TraversalState.Close:
                self.close()
                state = TraversalState.AdvanceCursor
            else:
                assert state is TraversalState.Handoff
                return state

    def descend_into(self) -> TraversalState | None:
        """Write the pending member, or open it if it's a container.

        Nothing is written unless the whole member can be: the value is
        classified and its strings are scanned before the key is written.
        """
        task = self.task
        value = task.pending_value
        value_type = type(value)
        text: str | None

        if value is None:
            text = "null"
        elif value_type is bool:
            text = "true" if value else "false"
        elif value_type is int or value_type is float:
            text = number_to_json(value)  # type: ignore[arg-type]
        elif value_type is str:
            result = scan(value, well_formed=self.well_formed)
            if not self.accepts(result):
                return None
            text = f'"{result.escaped if result.needs_escaping else value}"'
        elif value_type is dict or value_type is JSObject:
            return self.open_object(value)
        elif value_type is list or value_type is tuple or value_type is JSArray:
            return self.open_array(value)
        elif value is JSUndefined or value_type is JSSymbol:
            text = None
        elif value is JSHole:
            return self.handoff(Disqualification.HoleyArray)
        elif isinstance(value, (str, JSConsString)):
            return self.handoff(Disqualification.NonFlatString)
        elif isinstance(value, datetime):
            return self.handoff(Disqualification.CustomToJSON)
        elif callable(value) and not isinstance(value, (Mapping, JSObject)):
            # A function
            text = None
        else:
            return self.handoff(Disqualification.UnsupportedValue)

        top = task.top
        if text is None:
            if top is None:
                task.undefined = True
                return TraversalState.AdvanceCursor
            if not top.is_array:
                return TraversalState.AdvanceCursor
            text = "null"

        prefix = self.member_prefix(top)
        if prefix is None:
            return None
        task.buffer.write(f"{prefix}{text}")
        if top is not None:
            top.written += 1
        return TraversalState.AdvanceCursor

    def member_prefix(self, top: WorkItem | None) -> str | None:
        """Get the separator and key to write before the pending member.

        Returns None if the key can't be written at this width.
        """
        if top is None:
            return ""
        comma = "," if top.written else ""
        if top.keys is None:
            return comma
        key = self.task.pending_key
        if top.keys_cacheable:
            return f'{comma}"{key}":'
        result = scan(key, well_formed=self.well_formed)
        if not self.accepts(result):
            return None
        return f'{comma}"{result.escaped if result.needs_escaping else key}":'

    def check_not_active(self, value: object) -> None:
        if self.task.is_active(value):
            raise CircularStructureStringifyError(
                CIRCULAR_STRUCTURE_MESSAGE, value=value
            )

    def open_object(self, value: object) -> TraversalState | None:
        self.check_not_active(value)
        provider = self.provider
        reason = provider.check_container(value)
        if reason is not None:
            return self.handoff(reason)

        shape = provider.shape_of(value)
        entry = UNKNOWN_ENTRY if shape is None else self.shape_cache.get(shape)
        if entry.status is ShapeStatus.Disqualified:
            assert entry.disqualification is not None
            return self.handoff(entry.disqualification)

        trusted = entry.status is ShapeStatus.FastJsonIterable
        keys = provider.fast_keys(value, trusted=trusted)
        if isinstance(keys, Disqualification):
            if (
                shape is not None
                and not trusted
                and keys not in _KEY_TYPE_DISQUALIFICATIONS
            ):
                self.shape_cache.record(shape, ShapeStatus.Disqualified, keys)
            return self.handoff(keys)

        if trusted:
            cacheable = True
        elif entry.status is ShapeStatus.NeedsKeyScan:
            cacheable = False
        else:
            cacheable = all(_is_plain_narrow_key(key) for key in keys)
        item = WorkItem(
            value,
            keys,
            len(keys),
            shape=shape,
            shape_trusted=trusted,
            keys_cacheable=cacheable,
        )
        return self.open(item, "{")

    def open_array(self, value: object) -> TraversalState | None:
        self.check_not_active(value)
        reason = self.provider.check_container(value)
        if reason is not None:
            return self.handoff(reason)
        item = WorkItem(value, None, self.provider.array_length(value))
        return self.open(item, "[")

    def open(self, item: WorkItem, token: str) -> TraversalState | None:
        task = self.task
        top = task.top
        prefix = self.member_prefix(top)
        if prefix is None:
            return None
        task.buffer.write(f"{prefix}{token}")
        if top is not None:
            top.written += 1
        task.push(item)
        return TraversalState.AdvanceCursor

    def close(self) -> None:
        task = self.task
        item = task.pop()
        task.buffer.write(item.closing_token)
        if item.shape is not None and not item.shape_trusted:
            status = (
                ShapeStatus.FastJsonIterable
                if item.keys_cacheable
                else ShapeStatus.NeedsKeyScan
            )
            self.shape_cache.record(item.shape, status)

    def handoff(self, reason: Disqualification) -> TraversalState:
        task = self.task
        task.used_fallback = True
        task.disqualification = reason
        logger.debug(
            "JSON fast path handing off to the general serializer at depth %d: %s",
            task.depth,
            reason,
        )
        return TraversalState.Handoff


class _NarrowTraversal(_FastPathTraversal):
    width = EncodingWidth.NARROW

    def accepts(self, result: ScanResult) -> bool:
        return result.width is EncodingWidth.NARROW


class _WideTraversal(_FastPathTraversal):
    width = EncodingWidth.WIDE

    def accepts(self, result: ScanResult) -> bool:
        return True


@dataclass(init=False)
class Stringifier:
    """
    A re-usable configuration for serializing values as JSON text.

    The `features` and `v8_version` arguments behave as described for
    [`stringify()`]. The `serialize()` method reports how the text was produced
    as well as the text itself.

    [`stringify()`]: `jsstringify.stringify`

    Parameters
    ----------
    features
        The [`StringifyFeature`](`jsstringify.StringifyFeature`)s to enable.
    v8_version
        Enable the features of this V8 release.
    segment_size
        The capacity in bytes of each segment of the fast path's output buffers.
    provider
        Determines how the properties of values are enumerated and read.
    shape_cache
        Where the fast path records what it finds out about object shapes.
        Defaults to the process-wide cache.
    general_serializer
        Serializes values the fast path can't, and finishes traversals it hands
        off.

    Examples
    --------
    >>> result = Stringifier().serialize({"greeting": "hello", "n": [1.5, True]})
    >>> result.text
    '{"greeting":"hello","n":[1.5,true]}'
    >>> result.used_fallback
    False
    """

    features: StringifyFeature
    segment_size: int
    provider: PropertyEnumerationProvider
    shape_cache: ShapeCache
    general_serializer: GeneralSerializer

    def __init__(
        self,
        *,
        features: StringifyFeature | None = None,
        v8_version: Version | str | None = None,
        segment_size: int = DEFAULT_SEGMENT_SIZE,
        provider: PropertyEnumerationProvider | None = None,
        shape_cache: ShapeCache | None = None,
        general_serializer: GeneralSerializer | None = None,
    ) -> None:
        if features is None and v8_version is None:
            features = StringifyFeature.all()
        else:
            if features is None:
                features = StringifyFeature.Baseline
            if v8_version is not None:
                features |= StringifyFeature.supported_by(v8_version=v8_version)
        self.features = features
        self.segment_size = segment_size
        self.provider = default_property_provider if provider is None else provider
        self.shape_cache = default_shape_cache if shape_cache is None else shape_cache
        if general_serializer is None:
            general_serializer = DefaultGeneralSerializer(
                provider=self.provider, well_formed=self.well_formed
            )
        self.general_serializer = general_serializer

    @property
    def well_formed(self) -> bool:
        return StringifyFeature.WellFormedStrings in self.features

    @property
    def first_v8_version(self) -> Version:
        """The earliest V8 release that behaves like this Stringifier."""
        return max(
            (f.first_v8_version for f in self.features),
            default=StringifyFeature.Baseline.first_v8_version,
        )

    def _serialize_generally(
        self,
        value: object,
        replacer: Replacer,
        space: Space,
        reason: Disqualification,
    ) -> StringifyResult:
        logger.debug("Serializing JSON with the general serializer: %s", reason)
        text = self.general_serializer.serialize(value, replacer=replacer, space=space)
        return StringifyResult(text, used_fallback=True, disqualification=reason)

    def _traversal(
        self, traversal: type[_FastPathTraversal], task: SerializationTask
    ) -> _FastPathTraversal:
        return traversal(
            task,
            provider=self.provider,
            shape_cache=self.shape_cache,
            well_formed=self.well_formed,
        )

    def serialize(
        self, value: object, replacer: Replacer = None, space: Space = None
    ) -> StringifyResult:
        """Serialize a value as JSON text, and report how it was done.

        Arguments behave as for [`stringify()`](`jsstringify.stringify`).
        """
        if replacer is not None or space is not None:
            return self._serialize_generally(
                value, replacer, space, Disqualification.ReplacerOrSpace
            )
        if StringifyFeature.FastPath not in self.features:
            return self._serialize_generally(
                value, None, None, Disqualification.FastPathDisabled
            )

        task = SerializationTask(
            root=value, buffer=OutputBuffer(EncodingWidth.NARROW, self.segment_size)
        )
        narrow = self._traversal(_NarrowTraversal, task)
        state = narrow.run(TraversalState.DescendInto)
        if state is TraversalState.DescendInto:
            logger.debug(
                "JSON fast path switching to wide encoding at depth %d", task.depth
            )
            task.switch_buffer(OutputBuffer(EncodingWidth.WIDE, self.segment_size))
            state = self._traversal(_WideTraversal, task).run(state)

        prefix = task.finalize()
        text: str | JSUndefinedType
        if state is TraversalState.Handoff:
            remainder = self.general_serializer.resume(
                task.pending_key, task.pending_value, list(task.frames())
            )
            if remainder is JSUndefined:
                assert not prefix
                text = JSUndefined
            else:
                text = f"{prefix}{remainder}"
        elif task.undefined:
            text = JSUndefined
        else:
            text = prefix

        return StringifyResult(
            text,
            used_fallback=task.used_fallback,
            disqualification=task.disqualification,
            promoted=task.promoted,
        )

    def stringify(
        self, value: object, replacer: Replacer = None, space: Space = None
    ) -> str | JSUndefinedType:
        """Serialize a value as JSON text.

        Arguments behave as for [`stringify()`](`jsstringify.stringify`).
        """
        return self.serialize(value, replacer, space).text


def stringify(
    value: object,
    replacer: Replacer = None,
    space: Space = None,
    *,
    features: StringifyFeature | None = None,
    v8_version: Version | str | None = None,
) -> str | JSUndefinedType:
    """
    Serialize a Python value as JSON text, like JavaScript's `JSON.stringify()`.

    Values are interpreted with JavaScript semantics:

    * `None` is `null`, `bool` is a boolean, `int` and `float` are numbers
      (non-finite numbers are written as `null`);
    * `str` is a string;
    * `dict` is a plain object, `list` and `tuple` are arrays;
    * `JSUndefined`, `JSSymbol` and callables are omitted from objects, written
      as `null` in arrays, and make the result `JSUndefined` at the top level;
    * `datetime` is a `Date` (written as an ISO 8601 UTC string);
    * `JSObject`, `JSArray`, `JSConsString` and `JSBigInt` model JavaScript
      values with prototypes, getters, symbol keys, holes, lazy strings and
      BigInts.

    Plain data is serialized by a fast path that never runs user code. Anything
    else is serialized by the general serializer, which implements the full
    ECMAScript algorithm; the output is the same either way.

    Parameters
    ----------
    value
        The Python value to serialize.
    replacer
        A function called as `replacer(holder, key, value)` for every property,
        whose result is serialized instead of the value, or a list of the
        property names to include.
    space
        Indent nested values by this many spaces (up to 10), or by this string
        (up to its first 10 characters).
    features
        The [`StringifyFeature`](`jsstringify.StringifyFeature`)s to enable.
        By default all features are enabled.
    v8_version
        Enable the features of this V8 release.

    Returns
    -------
    :
        The JSON text, or `JSUndefined` if `value` is not representable.

    Raises
    ------
    CircularStructureStringifyError
        If `value` contains a reference to one of its ancestors.
    UnserializableValueStringifyError
        If `value` contains a `JSBigInt`, or an `int` too large for a
        JavaScript number.
    UnhandledValueStringifyError
        If `value` contains a Python object with no JavaScript equivalent.

    Examples
    --------
    >>> stringify({"name": "Bob", "tags": ["a", None], "skip": JSUndefined})
    '{"name":"Bob","tags":["a",null]}'
    >>> stringify([1, 2], space=1)
    '[\\n 1,\\n 2\\n]'
    >>> stringify(JSUndefined)
    JSUndefined
    """
    return Stringifier(features=features, v8_version=v8_version).stringify(
        value, replacer, space
    )
