from __future__ import annotations

import sys
from enum import Flag
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from typing_extensions import Self


if sys.version_info < (3, 11):
    # Flag members are not iterable before 3.11.
    class IterableFlag(Flag):
        def __iter__(self) -> Iterator[Self]:
            for flag in type(self):
                if flag.value and self & flag == flag:
                    yield flag

else:

    class IterableFlag(Flag):
        pass


if sys.version_info < (3, 11):
    from enum import Enum

    class StrEnum(str, Enum):
        def __str__(self) -> str:
            return str(self._value_)

else:
    from enum import StrEnum as StrEnum  # noqa: F401  # re-export
