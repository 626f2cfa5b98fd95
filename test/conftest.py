from __future__ import annotations

from collections.abc import Generator

import pytest

from jsstringify.jstypes import ARRAY_PROTOTYPE, OBJECT_PROTOTYPE
from jsstringify.shapecache import ShapeCache


@pytest.fixture
def shape_cache() -> ShapeCache:
    """An empty cache, so that tests don't see shapes recorded by other tests."""
    return ShapeCache()


@pytest.fixture
def restore_prototypes() -> Generator[None, None, None]:
    """Remove properties that a test adds to the shared prototypes."""
    prototypes = [OBJECT_PROTOTYPE, ARRAY_PROTOTYPE]
    original_keys = [set(proto.own_property_keys()) for proto in prototypes]
    yield
    for proto, keys in zip(prototypes, original_keys):
        for key in proto.own_property_keys():
            if key not in keys:
                del proto[key]
