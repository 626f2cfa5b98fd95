"""The main public API of jsstringify."""

from __future__ import annotations

from jsstringify._errors import (
    CircularStructureStringifyError as CircularStructureStringifyError,
)
from jsstringify._errors import BufferFinalizedError as BufferFinalizedError
from jsstringify._errors import JSStringifyError as JSStringifyError
from jsstringify._errors import NormalizedKeyError as NormalizedKeyError
from jsstringify._errors import (
    UnhandledValueStringifyError as UnhandledValueStringifyError,
)
from jsstringify._errors import (
    UnserializableValueStringifyError as UnserializableValueStringifyError,
)
from jsstringify.buffer import OutputBuffer as OutputBuffer
from jsstringify.constants import Disqualification as Disqualification
from jsstringify.constants import EncodingWidth as EncodingWidth
from jsstringify.constants import StringifyFeature as StringifyFeature
from jsstringify.general import DefaultGeneralSerializer as DefaultGeneralSerializer
from jsstringify.general import GeneralSerializer as GeneralSerializer
from jsstringify.general import Replacer as Replacer
from jsstringify.general import ReplacerFn as ReplacerFn
from jsstringify.general import Space as Space
from jsstringify.number_format import format_number as format_number
from jsstringify.properties import DefaultPropertyProvider as DefaultPropertyProvider
from jsstringify.properties import (
    PropertyEnumerationProvider as PropertyEnumerationProvider,
)
from jsstringify.properties import (
    default_property_provider as default_property_provider,
)
from jsstringify.scanner import ScanResult as ScanResult
from jsstringify.scanner import scan as scan
from jsstringify.shapecache import ShapeCache as ShapeCache
from jsstringify.shapecache import ShapeStatus as ShapeStatus
from jsstringify.shapecache import default_shape_cache as default_shape_cache
from jsstringify.stringify import Stringifier as Stringifier
from jsstringify.stringify import StringifyResult as StringifyResult
from jsstringify.stringify import stringify as stringify
