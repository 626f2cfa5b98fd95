from __future__ import annotations

import re

from packaging.version import VERSION_PATTERN, InvalidVersion, Version

LENIENT_VERSION_PATTERN = re.compile(
    f"^(?P<version>{VERSION_PATTERN})(?:-(?P<suffix>\\S+))?$", re.VERBOSE
)


def parse_lenient_version(version: str) -> Version:
    """
    Parse a V8 version number less strictly than `packaging.version.parse()`.

    Embedders report V8 versions with a suffix after a `-`, for example Node.js
    reports `process.versions.v8` as `12.4.254.21-node.33`. These suffixes
    become the local part of a Python Version.

    >>> version = parse_lenient_version("12.4.254.21-node.33")
    >>> version
    <Version('12.4.254.21+node.33')>
    >>> version.local
    'node.33'

    >>> parse_lenient_version("13.8")
    <Version('13.8')>

    >>> parse_lenient_version("chrome")  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
    packaging.version.InvalidVersion: chrome
    """
    match = LENIENT_VERSION_PATTERN.match(version)
    if not match:
        raise InvalidVersion(version)

    # A matched local part consumes everything, so a suffix only exists when
    # the version has no +local part of its own.
    lenient_suffix = match.group("suffix")
    if lenient_suffix:
        assert not match.group("local")
        return Version(f"{match.group('version')}+{lenient_suffix}")
    return Version(version)
