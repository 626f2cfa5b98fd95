"""Find the characters of a string that JSON text must escape.

Strings are scanned in chunks. A chunk of `VECTOR_CHUNK_SIZE` units is checked
with a single compiled character-class search, and a narrow remainder shorter
than a whole chunk is checked `WORD_CHUNK_SIZE` bytes at a time using
word-parallel bit tricks on an `int`. Chunks without escapable characters are
copied verbatim. Only chunks that contain one get a precise per-character pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from jsstringify._pycompat.dataclasses import slots_if310
from jsstringify.constants import VECTOR_CHUNK_SIZE, WORD_CHUNK_SIZE, EncodingWidth

_ESCAPES: Final[dict[str, str]] = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
for _code in range(0x20):
    _ESCAPES.setdefault(chr(_code), f"\\u{_code:04x}")
del _code

# Bulk detection. The wide pattern matches every surrogate, paired or not: a
# chunk containing a pair gets the precise pass, which leaves pairs alone.
_NARROW_ESCAPABLE: Final = re.compile('["\\\\\x00-\x1f]')
_WIDE_ESCAPABLE: Final = re.compile('["\\\\\x00-\x1f\ud800-\udfff]')

# Precise per-character passes.
_ESCAPE_CHARS: Final = _NARROW_ESCAPABLE
_ESCAPE_CHARS_AND_LONE_SURROGATES: Final = re.compile(
    '["\\\\\x00-\x1f]'
    "|[\ud800-\udbff](?![\udc00-\udfff])"
    "|(?<![\ud800-\udbff])[\udc00-\udfff]"
)

_ONES: Final = 0x0101010101010101
_HIGHS: Final = 0x8080808080808080
_CONTROL_LIMIT: Final = _ONES * 0x20
_QUOTES: Final = _ONES * ord('"')
_BACKSLASHES: Final = _ONES * ord("\\")
# Pads a partial final word with bytes that never need escaping.
_WORD_PADDING: Final = b"A"


@dataclass(frozen=True, **slots_if310())
class ScanResult:
    """What a scan found out about a string.

    `escaped` holds the string's JSON-escaped text (without the surrounding
    quotes) when `needs_escaping` is true, otherwise the string can be written
    as it is. `width` is the narrowest encoding that can hold the string.
    Strings that are not `flat` were not scanned.
    """

    needs_escaping: bool
    width: EncodingWidth | None
    escaped: str | None = None
    flat: bool = True


NOT_FLAT: Final = ScanResult(needs_escaping=False, width=None, flat=False)


def _escape_match(match: re.Match[str]) -> str:
    char = match.group()
    escape = _ESCAPES.get(char)
    if escape is None:
        # A lone surrogate
        return f"\\u{ord(char):04x}"
    return escape


def _word_needs_escaping(word: int) -> bool:
    """Check if any byte of a 64-bit little-endian word needs escaping.

    Uses the "has a byte less than n" and "has a zero byte" tests from
    https://graphics.stanford.edu/~seander/bithacks.html#HasLessInWord. Python
    ints have no fixed width, so a subtraction that borrows past bit 63
    produces a negative number; masking with `_HIGHS` keeps just the low 64
    bits of the two's complement result, as unsigned arithmetic would.
    """
    quotes = word ^ _QUOTES
    backslashes = word ^ _BACKSLASHES
    return bool(
        (
            ((word - _CONTROL_LIMIT) & ~word)
            | ((quotes - _ONES) & ~quotes)
            | ((backslashes - _ONES) & ~backslashes)
        )
        & _HIGHS
    )


def _words_need_escaping(data: bytes) -> bool:
    for start in range(0, len(data), WORD_CHUNK_SIZE):
        word_bytes = data[start : start + WORD_CHUNK_SIZE]
        if len(word_bytes) < WORD_CHUNK_SIZE:
            word_bytes = word_bytes.ljust(WORD_CHUNK_SIZE, _WORD_PADDING)
        if _word_needs_escaping(int.from_bytes(word_bytes, "little")):
            return True
    return False


def detect_width(value: str) -> EncodingWidth:
    """Get the narrowest encoding width that can hold a string.

    >>> detect_width("café")
    <EncodingWidth.NARROW: 1>
    >>> detect_width("€")
    <EncodingWidth.WIDE: 2>
    """
    if value.isascii() or max(value) <= "\xff":
        return EncodingWidth.NARROW
    return EncodingWidth.WIDE


def scan(value: object, *, well_formed: bool = True) -> ScanResult:
    """Find out if a string needs escaping, and escape it if so.

    Arguments
    ---------
    value
        The string to scan. Only exact `str` instances are flat: `str`
        subclasses and other objects report `flat=False` without being scanned.
    well_formed
        Escape lone surrogates (surrogate code points that are not part of a
        high-low pair) as `\\udxxx`. Otherwise they are left unchanged.

    Examples
    --------
    >>> scan("plain")
    ScanResult(needs_escaping=False, width=<EncodingWidth.NARROW: 1>, \
escaped=None, flat=True)
    >>> scan('say "hi"\\n').escaped
    'say \\\\"hi\\\\"\\\\n'
    >>> scan("\\ud800").escaped
    '\\\\ud800'
    """
    if type(value) is not str:
        return NOT_FLAT

    width = detect_width(value)
    wide = width is EncodingWidth.WIDE
    bulk = _WIDE_ESCAPABLE if wide else _NARROW_ESCAPABLE
    precise = (
        _ESCAPE_CHARS_AND_LONE_SURROGATES if wide and well_formed else _ESCAPE_CHARS
    )

    length = len(value)
    whole_chunks_end = length - length % VECTOR_CHUNK_SIZE
    parts: list[str] = []
    escaping = False
    pos = 0

    while pos < whole_chunks_end:
        match = bulk.search(value, pos, whole_chunks_end)
        if match is None:
            parts.append(value[pos:whole_chunks_end])
            pos = whole_chunks_end
            break
        offset = match.start() - pos
        chunk_start = pos + offset - offset % VECTOR_CHUNK_SIZE
        chunk_end = chunk_start + VECTOR_CHUNK_SIZE
        # Keep a surrogate pair in one chunk so that its halves are not seen as
        # lone surrogates.
        if wide and "\ud800" <= value[chunk_end - 1] <= "\udbff":
            chunk_end = min(chunk_end + 1, length)
        parts.append(value[pos:chunk_start])
        chunk = value[chunk_start:chunk_end]
        escaped_chunk = precise.sub(_escape_match, chunk)
        escaping = escaping or escaped_chunk != chunk
        parts.append(escaped_chunk)
        pos = chunk_end

    if pos < length:
        remainder = value[pos:]
        if wide:
            dirty = bulk.search(remainder) is not None
        else:
            dirty = _words_need_escaping(remainder.encode("latin-1"))
        if dirty:
            escaped_remainder = precise.sub(_escape_match, remainder)
            escaping = escaping or escaped_remainder != remainder
            parts.append(escaped_remainder)
        else:
            parts.append(remainder)

    if not escaping:
        return ScanResult(needs_escaping=False, width=width)
    return ScanResult(needs_escaping=True, width=width, escaped="".join(parts))


def quote(value: str, *, well_formed: bool = True) -> str:
    """Get the JSON string literal of a `str`, like `QuoteJSONString`.

    >>> quote('tab\\there')
    '"tab\\\\there"'
    """
    if type(value) is not str:
        value = str.__str__(value)
    result = scan(value, well_formed=well_formed)
    return f'"{result.escaped if result.needs_escaping else value}"'
