"""
Access to remote metadata and programs hosted on GitHub.

    cache:   conditional GET cache (ETag revalidation, one file per URL)
    github:  tag resolution and versions.json lookups
    install: download of release archives into the bin directory
"""

from .cache import API_TIMEOUT, CacheEntry, GithubCache
from .exceptions import (
    CacheCorruptError,
    DecodeError,
    ExternalError,
    HTTPStatusError,
    InstallError,
    InvalidSchemaError,
    NoTagsError,
    TagError,
    TagListUnavailableError,
    TagNotFoundError,
    ToolExecutionError,
    TransportError,
    VersionResolutionError,
)
from .github import (
    Tag,
    latest_tag,
    library_version_from_cg_version,
    load_versions_json,
    tag_for_version,
)
from .install import GithubReleaseInstaller, Installer

__all__ = [
    "API_TIMEOUT",
    "CacheEntry",
    "GithubCache",
    "Tag",
    "latest_tag",
    "tag_for_version",
    "load_versions_json",
    "library_version_from_cg_version",
    "Installer",
    "GithubReleaseInstaller",
    # exceptions
    "ExternalError",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
    "CacheCorruptError",
    "TagError",
    "TagListUnavailableError",
    "NoTagsError",
    "TagNotFoundError",
    "InstallError",
    "ToolExecutionError",
    "VersionResolutionError",
    "InvalidSchemaError",
]
