"""Constant values related to JavaScript's JSON serialization."""

from __future__ import annotations

import functools
from enum import Enum
from typing import TYPE_CHECKING, Final

from packaging.version import Version

from jsstringify._pycompat.enum import IterableFlag, StrEnum
from jsstringify._versions import parse_lenient_version

if TYPE_CHECKING:
    from typing_extensions import Self

MAX_ARRAY_LENGTH: Final = 2**32 - 1
"""
1 larger than the maximum integer index of a JavaScript array.

Property keys that are integers below this limit are array indexes (and so are
enumerated before other keys, in ascending numeric order). Larger integers are
ordinary string property names.
"""

MAX_SAFE_INTEGER: Final = 2**53 - 1
"""The largest integer a JavaScript number (64-bit float) represents exactly."""

DEFAULT_SEGMENT_SIZE: Final = 16 * 1024
"""Capacity in bytes of each segment of an `OutputBuffer`."""

VECTOR_CHUNK_SIZE: Final = 32
"""Strings are scanned for escapable characters in chunks of this many units."""

WORD_CHUNK_SIZE: Final = 8
"""Narrow remainders shorter than a vector chunk are scanned a word at a time."""

SPACE_MAX_LENGTH: Final = 10
"""`space` indentation is clamped to this many characters, as in JavaScript."""


class EncodingWidth(Enum):
    """The number of bytes used to store each unit of text.

    Narrow text holds only code points up to U+00FF (one byte per unit, like
    V8's one-byte strings). Wide text is stored as UTF-16 code units.
    """

    NARROW = 1, "latin-1", "strict"
    WIDE = 2, "utf-16-le", "surrogatepass"

    if TYPE_CHECKING:
        unit_size: int
        codec: str
        codec_errors: str

    else:

        def __new__(cls, unit_size: int, codec: str, codec_errors: str) -> Self:
            obj = object.__new__(cls)
            obj._value_ = unit_size
            obj.unit_size = unit_size
            obj.codec = codec
            obj.codec_errors = codec_errors
            return obj

    def encode(self, text: str) -> bytes:
        return text.encode(self.codec, self.codec_errors)

    def decode(self, data: bytes | bytearray) -> str:
        return data.decode(self.codec, self.codec_errors)


class Disqualification(StrEnum):
    """A reason for the fast path to hand a value to the general serializer.

    Disqualifications are routing decisions, not errors. Each one names a
    condition under which serializing a value could run user code, or which the
    fast path does not implement.
    """

    ReplacerOrSpace = "replacer or space argument"
    FastPathDisabled = "fast path feature not enabled"
    CustomToJSON = "toJSON method"
    NonStandardPrototype = "non-standard prototype"
    SymbolKey = "symbol property key"
    NonStringKey = "dict key that is not a str"
    NonEnumerableKey = "non-enumerable property"
    AccessorProperty = "accessor property"
    IndexedProperty = "indexed property on a non-array object"
    HoleyArray = "array with holes"
    NonFlatString = "string requiring flattening"
    UnsupportedValue = "value type not handled by the fast path"


class StringifyFeature(IterableFlag):
    """Changes to JSON.stringify behaviour between V8 releases.

    Each flag records the first V8 release that behaves this way. Pass
    `v8_version` to [`Stringifier`](`jsstringify.Stringifier`) to reproduce
    the behaviour of a particular release; by default all features are
    enabled.

    Examples
    --------
    >>> StringifyFeature.FastPath.first_v8_version
    <Version('13.8')>
    >>> StringifyFeature.supported_by(v8_version="12.4.254.21-node.33")
    <StringifyFeature.WellFormedStrings: 1>
    """

    Baseline = 0, "5.0"
    """Behaviour shared by all supported versions."""

    WellFormedStrings = 1, "7.2"
    """
    Escape lone surrogates as `\\udxxx` instead of writing them raw.

    This is the [Well-formed JSON.stringify](\
https://github.com/tc39/proposal-well-formed-stringify) proposal, shipped in
    V8 7.2. Earlier versions output unpaired surrogates unchanged, which
    produces text that is not valid Unicode.
    """

    FastPath = 2, "13.8"
    """
    Serialize plain data with the side-effect-free fast path.

    Output is identical with or without this feature; it only affects the
    work done to produce it.
    """

    __first_v8_version: Version

    if not TYPE_CHECKING:

        def __new__(cls, flag: int, first_v8_version: str) -> Self:
            obj = object.__new__(cls)
            obj._value_ = flag
            obj.__first_v8_version = Version(first_v8_version)
            return obj

    if TYPE_CHECKING:

        def __invert__(self) -> Self: ...

    @property
    def first_v8_version(self) -> Version:
        """The V8 release that introduced this feature."""
        return self.__first_v8_version

    @classmethod
    @functools.lru_cache  # noqa: B019 # OK because static method
    def supported_by(cls, *, v8_version: Version | str) -> StringifyFeature:
        """Get the features of JSON.stringify in a V8 release.

        Arguments
        ---------
        v8_version:
            A V8 release number. Strings can have a `-suffix` as reported by
            embedders like Node.js.
        """
        if isinstance(v8_version, str):
            v8_version = parse_lenient_version(v8_version)

        if v8_version < cls.Baseline.first_v8_version:
            raise LookupError(
                f"V8 version {v8_version} is earlier than the first supported "
                f"V8 version. v8_version must be >= "
                f"{cls.Baseline.first_v8_version}"
            )

        features = cls.Baseline
        for feature in cls:
            if feature.first_v8_version <= v8_version:
                features |= feature
        return features

    @classmethod
    def all(cls) -> StringifyFeature:
        features = cls.Baseline
        for feature in cls:
            features |= feature
        return features
