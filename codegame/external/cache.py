"""
Conditional GET cache for GitHub API and raw content requests.

Every request URL maps to one file in the cache directory. The file name is
the percent-escaped URL and the content is exactly two lines:

    "abc123"                  <- validator (ETag) of the stored response
    [{"name":"v0.4.1"}]       <- payload, serialized as one line of JSON

Flow of ``GithubCache.fetch(url, shape)``:

    1. If an entry exists, send ``If-None-Match: <etag>``.
    2. 200: decode the body into ``shape`` and replace the entry.
    3. 304: decode the stored payload into ``shape``.
    4. Anything else: HTTPStatusError.

Transport failures never touch the cache. Entries are written to a temporary
file and moved into place with ``os.replace`` so a reader sees either the old
or the new entry, never a partial one. Concurrent writers are last-wins; there
is no locking.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Type, TypeVar
from urllib.parse import quote

import requests
from pydantic import TypeAdapter, ValidationError

from codegame.config import Dirs
from codegame.external.exceptions import (
    CacheCorruptError,
    DecodeError,
    HTTPStatusError,
    TransportError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Timeout used by API style clients sharing this transport.
API_TIMEOUT = 10

GITHUB_API_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}


@dataclass
class CacheEntry:
    """A stored response: validator token and decoded payload."""

    url: str
    etag: str
    payload: Any


def cache_file_name(url: str) -> str:
    """Escape a request URL so it can be used as a single file name."""
    return quote(url, safe="")


class GithubCache:
    """
    Fetch JSON documents with ETag revalidation against a per-URL file cache.

    Args:
        dirs: Directories to use (defaults to the XDG locations)
        session: requests session used for all requests
        timeout: Timeout in seconds passed to the session (None: no timeout)
    """

    def __init__(
        self,
        dirs: Optional[Dirs] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.dirs = dirs or Dirs.default()
        self.cache_dir = self.dirs.github_cache_dir
        self.session = session or requests.Session()
        self.timeout = timeout

    def entry_path(self, url: str) -> Path:
        return self.cache_dir / cache_file_name(url)

    def etag(self, url: str) -> Optional[str]:
        """Return the stored validator for ``url``, or None if there is no entry."""
        try:
            with open(self.entry_path(url), "r", encoding="utf-8", newline="") as f:
                line = f.readline()
        except OSError:
            return None
        if not line:
            return None
        return line.rstrip("\r\n")

    def read_entry(self, url: str, shape: Type[T] = Any) -> CacheEntry:
        """
        Load the stored entry for ``url`` without any network round-trip.

        Args:
            url: Request URL used as the cache key
            shape: Type the payload is decoded into

        Returns:
            CacheEntry with the decoded payload

        Raises:
            CacheCorruptError: If the entry is missing, truncated or not valid JSON
        """
        path = self.entry_path(url)
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except OSError as e:
            raise CacheCorruptError(url, str(e)) from e

        # Only "\n" separates the two lines; JSON strings may hold U+2028 etc. raw
        etag, _, rest = content.partition("\n")
        blob = rest.rstrip("\r\n")
        if not blob:
            raise CacheCorruptError(url, f"no payload line in {path}")

        try:
            payload = TypeAdapter(shape).validate_json(blob)
        except ValidationError as e:
            raise CacheCorruptError(url, str(e)) from e

        return CacheEntry(url=url, etag=etag.rstrip("\r"), payload=payload)

    def write_entry(self, entry: CacheEntry, shape: Type[T] = Any) -> Path:
        """
        Replace the stored entry for ``entry.url``.

        The payload is serialized with the same ``shape`` used to decode it.
        """
        blob = TypeAdapter(shape).dump_json(entry.payload).decode("utf-8")
        etag = entry.etag.replace("\n", "").replace("\r", "")

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.entry_path(entry.url)
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(etag + "\n")
                f.write(blob + "\n")
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        return path

    def fetch(self, url: str, shape: Type[T]) -> T:
        """
        GET ``url`` and decode the JSON body into ``shape``.

        Args:
            url: Request URL, also the cache key
            shape: Any type accepted by pydantic's TypeAdapter, e.g. ``list[Tag]``

        Returns:
            The decoded payload, fresh or from the cache

        Raises:
            TransportError: If the request could not be sent or no response arrived
            HTTPStatusError: If the status is neither 200 nor 304
            DecodeError: If a fresh body cannot be decoded
            CacheCorruptError: If the server answered 304 but no usable entry exists
        """
        adapter = TypeAdapter(shape)

        headers = {}
        if url.startswith("https://api.github.com/"):
            headers.update(GITHUB_API_HEADERS)
        etag = self.etag(url)
        if etag:
            headers["If-None-Match"] = etag

        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e

        if response.status_code == requests.codes.ok:
            try:
                data = adapter.validate_json(response.content)
            except ValidationError as e:
                raise DecodeError(url, str(e)) from e

            new_etag = response.headers.get("ETag", "")
            try:
                self.write_entry(CacheEntry(url=url, etag=new_etag, payload=data), shape)
                logger.debug(f"Cached {url} (etag {new_etag!r})")
            except OSError as e:
                logger.warning(f"Could not write cache entry for {url}: {e}")
            return data

        if response.status_code == requests.codes.not_modified:
            logger.debug(f"Not modified, using cached response for {url}")
            return self.read_entry(url, shape).payload

        raise HTTPStatusError(url, response.status_code)
