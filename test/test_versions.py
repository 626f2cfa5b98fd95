from __future__ import annotations

import pytest
from packaging.version import InvalidVersion, Version

from jsstringify._versions import parse_lenient_version


@pytest.mark.parametrize(
    "version, expected",
    [
        ("13.8", Version("13.8")),
        ("12.4.254.21-node.33", Version("12.4.254.21+node.33")),
        ("11.3.244.8-electron.0", Version("11.3.244.8+electron.0")),
        ("7.2+local", Version("7.2+local")),
        ("5.0.71.52", Version("5.0.71.52")),
    ],
)
def test_parse_lenient_version(version: str, expected: Version) -> None:
    assert parse_lenient_version(version) == expected


@pytest.mark.parametrize("version", ["", "chrome", "13.8-", "13.8 node"])
def test_parse_lenient_version__invalid(version: str) -> None:
    with pytest.raises(InvalidVersion):
        parse_lenient_version(version)
