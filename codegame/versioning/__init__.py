"""
Version handling for CodeGame tags.

Version:
    x.y or x.y.z release version with ordering and a compatibility check.

resolved_version:
    Tag name -> 'major.minor' install key.

compatible_version:
    Picks an entry of a versions.json compatibility map.
"""

from .version import (
    LATEST,
    Version,
    compatible_version,
    resolved_version,
    strip_tag_prefix,
)

__all__ = [
    "LATEST",
    "Version",
    "compatible_version",
    "resolved_version",
    "strip_tag_prefix",
]
