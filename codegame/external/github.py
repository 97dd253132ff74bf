"""Tag and versions.json lookups for GitHub repositories, backed by GithubCache."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from codegame.external.cache import GithubCache
from codegame.external.exceptions import (
    ExternalError,
    NoTagsError,
    TagListUnavailableError,
    TagNotFoundError,
)
from codegame.versioning import LATEST, compatible_version

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"


class Tag(BaseModel):
    """A git tag as returned by the GitHub tags endpoint (other fields are ignored)."""

    name: str


def tags_url(owner: str, repo: str) -> str:
    return f"{GITHUB_API_URL}/repos/{owner}/{repo}/tags"


def versions_json_url(owner: str, repo: str, branch: str) -> str:
    return f"{GITHUB_RAW_URL}/{owner}/{repo}/{branch}/versions.json"


def _list_tags(owner: str, repo: str, cache: Optional[GithubCache]) -> List[Tag]:
    cache = cache or GithubCache()
    try:
        return cache.fetch(tags_url(owner, repo), List[Tag])
    except ExternalError as e:
        logger.debug(f"Fetching tags of {owner}/{repo} failed: {e}")
        raise TagListUnavailableError(owner, repo) from e


def latest_tag(owner: str, repo: str, cache: Optional[GithubCache] = None) -> str:
    """
    Return the newest tag of a repository.

    The GitHub API lists tags newest first, so this is the first element.

    Raises:
        TagListUnavailableError: If the tag list cannot be fetched
        NoTagsError: If the repository has no tags
    """
    tags = _list_tags(owner, repo, cache)
    if not tags:
        raise NoTagsError(owner, repo)
    return tags[0].name


def tag_for_version(
    owner: str, repo: str, version: str, cache: Optional[GithubCache] = None
) -> str:
    """
    Return the first tag, in API order, whose name starts with 'v' + version.

    Given tags ["v2.3.1", "v2.3.0", "v2.2.0"] and version "2.3" this is "v2.3.1".

    Raises:
        TagListUnavailableError: If the tag list cannot be fetched
        TagNotFoundError: If no tag matches
    """
    prefix = "v" + version
    for tag in _list_tags(owner, repo, cache):
        if tag.name.startswith(prefix):
            return tag.name
    raise TagNotFoundError(owner, repo, version)


def load_versions_json(owner: str, repo: str, cache: Optional[GithubCache] = None) -> Any:
    """
    Fetch versions.json from the main branch, falling back to master.

    Raises:
        ExternalError: If both attempts fail (the error of the master attempt)
    """
    cache = cache or GithubCache()
    try:
        return cache.fetch(versions_json_url(owner, repo, "main"), Any)
    except ExternalError as e:
        logger.debug(f"versions.json not available on main branch of {owner}/{repo}: {e}")
        return cache.fetch(versions_json_url(owner, repo, "master"), Any)


def library_version_from_cg_version(
    owner: str, repo: str, cg_version: str, cache: Optional[GithubCache] = None
) -> str:
    """
    Select the client library version compatible with a CodeGame version.

    Falls back to "latest" if versions.json is missing or malformed.
    """
    try:
        raw = load_versions_json(owner, repo, cache)
    except ExternalError:
        logger.warning("Couldn't fetch versions.json. Using latest client library version.")
        return LATEST

    try:
        versions = TypeAdapter(Dict[str, str]).validate_python(raw, strict=True)
    except ValidationError:
        logger.warning("Invalid versions.json. Using latest client library version.")
        return LATEST

    return compatible_version(versions, cg_version)
