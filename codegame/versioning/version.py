"""
Version utilities for CodeGame tags and versions.

Uses the standard packaging.version library for parsing and ordering.
"""

import re
from typing import Dict, Optional

from packaging.version import InvalidVersion, Version as PackagingVersion

LATEST = "latest"

_VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?$")


class Version:
    """
    A release version in format x.y.z or x.y (non-negative integers).

    Wraps packaging.version.Version for ordering while remembering whether a
    patch component was given.
    """

    def __init__(self, version_string: str):
        """
        Initialize a Version from a string.

        Args:
            version_string: Version string in format "x.y.z" or "x.y"

        Raises:
            ValueError: If version string is invalid
        """
        self._original_string = str(version_string).strip()

        if not _VERSION_PATTERN.match(self._original_string):
            raise ValueError(
                f"Invalid version format: '{self._original_string}'. Expected x.y.z or x.y"
            )

        try:
            self._version = PackagingVersion(self._original_string)
        except InvalidVersion as e:
            raise ValueError(
                f"Invalid version format: '{self._original_string}'. Expected x.y.z or x.y"
            ) from e

    @property
    def major(self) -> int:
        return self._version.major

    @property
    def minor(self) -> int:
        return self._version.minor

    @property
    def patch(self) -> Optional[int]:
        """Patch version component (None if not specified in original string)."""
        if self._original_string.count(".") >= 2:
            return self._version.micro
        return None

    def __str__(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"Version('{str(self)}')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Version):
            return False
        # 1.2 != 1.2.0
        return (self.major, self.minor, self.patch) == (
            other.major,
            other.minor,
            other.patch,
        )

    def __lt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version < other._version

    def __le__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version <= other._version

    def __gt__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version > other._version

    def __ge__(self, other) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._version >= other._version

    def __hash__(self) -> int:
        return hash(self._version)

    def is_compatible_with(self, other: "Version") -> bool:
        """
        Check whether something built for ``self`` works with ``other``.

        Same major version and a minor version not newer than ``other``. Before
        1.0 every minor release may break, so the minor versions must match.
        """
        if self.major != other.major:
            return False
        if self.major == 0:
            return self.minor == other.minor
        return self.minor <= other.minor


def strip_tag_prefix(tag: str) -> str:
    """Remove the leading 'v' of a tag name ('v0.4.1' -> '0.4.1')."""
    return tag[1:] if tag.startswith("v") else tag


def resolved_version(tag: str) -> str:
    """
    Reduce a tag name to the 'major.minor' version used as install key.

    Examples:
        v0.4.1 -> 0.4
        v1.2   -> 1.2
    """
    return ".".join(strip_tag_prefix(tag).split(".")[:2])


def compatible_version(versions: Dict[str, str], version: str) -> str:
    """
    Select the library version compatible with a CodeGame version.

    Args:
        versions: Mapping of CodeGame version -> library version (versions.json)
        version: The CodeGame version in use

    Returns:
        The library version mapped to the newest compatible CodeGame version,
        or "latest" if nothing matches.
    """
    try:
        wanted = Version(strip_tag_prefix(version))
    except ValueError:
        return LATEST

    best: Optional[Version] = None
    for key in versions:
        try:
            candidate = Version(strip_tag_prefix(key))
        except ValueError:
            continue
        if not candidate.is_compatible_with(wanted):
            continue
        if best is None or candidate > best:
            best = candidate
            best_key = key

    if best is None:
        return LATEST
    return versions[best_key]
