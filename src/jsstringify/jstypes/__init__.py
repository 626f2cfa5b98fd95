"""Python representations of the JavaScript values that JSON.stringify sees."""

from __future__ import annotations

from jsstringify.jstypes._normalise_property_key import PropertyKey as PropertyKey
from jsstringify.jstypes._normalise_property_key import (
    normalise_property_key as normalise_property_key,
)
from jsstringify.jstypes.jsarray import ARRAY_PROTOTYPE as ARRAY_PROTOTYPE
from jsstringify.jstypes.jsarray import JSArray as JSArray
from jsstringify.jstypes.jsbigint import JSBigInt as JSBigInt
from jsstringify.jstypes.jsconsstring import JSConsString as JSConsString
from jsstringify.jstypes.jshole import JSHole as JSHole
from jsstringify.jstypes.jshole import JSHoleType as JSHoleType
from jsstringify.jstypes.jsobject import OBJECT_PROTOTYPE as OBJECT_PROTOTYPE
from jsstringify.jstypes.jsobject import JSAccessor as JSAccessor
from jsstringify.jstypes.jsobject import JSObject as JSObject
from jsstringify.jstypes.jsobject import JSPropertyDescriptor as JSPropertyDescriptor
from jsstringify.jstypes.jsshape import JSShape as JSShape
from jsstringify.jstypes.jsshape import PropertyAttributes as PropertyAttributes
from jsstringify.jstypes.jssymbol import JSSymbol as JSSymbol
from jsstringify.jstypes.jsundefined import JSUndefined as JSUndefined
from jsstringify.jstypes.jsundefined import JSUndefinedType as JSUndefinedType
