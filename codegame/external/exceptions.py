"""
Exception classes for remote metadata resolution, caching and installation.
"""

from typing import Optional


class ExternalError(Exception):
    """Base exception for all errors raised by codegame.external."""

    pass


class TransportError(ExternalError):
    """Raised when a request fails before a response is received (DNS, connection, timeout)."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        if reason:
            super().__init__(f"Request to {url} failed: {reason}")
        else:
            super().__init__(f"Request to {url} failed")


class HTTPStatusError(ExternalError):
    """Raised when a response has a status other than 200 or 304."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"invalid http status {status_code} for {url}")


class DecodeError(ExternalError):
    """Raised when a payload cannot be decoded into the requested shape."""

    def __init__(self, url: str, reason: str, message: Optional[str] = None):
        self.url = url
        self.reason = reason
        super().__init__(message or f"Failed to decode response from {url}: {reason}")


class CacheCorruptError(DecodeError):
    """Raised on a 304 response when no usable cache entry exists for the URL."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            url, reason, f"Cache entry for {url} is missing or corrupt: {reason}"
        )


class TagError(ExternalError):
    """Base exception for tag resolution errors."""

    def __init__(self, owner: str, repo: str, message: str):
        self.owner = owner
        self.repo = repo
        super().__init__(message)


class TagListUnavailableError(TagError):
    """Raised when the tag list of a repository cannot be fetched."""

    def __init__(self, owner: str, repo: str):
        super().__init__(
            owner, repo, f"failed to access git tags from 'github.com/{owner}/{repo}'"
        )


class NoTagsError(TagError):
    """Raised when a repository has no tags at all."""

    def __init__(self, owner: str, repo: str):
        super().__init__(owner, repo, f"no tags found in 'github.com/{owner}/{repo}'")


class TagNotFoundError(TagError):
    """Raised when no tag matches a requested version prefix."""

    def __init__(self, owner: str, repo: str, version: str):
        self.version = version
        super().__init__(
            owner,
            repo,
            f"tag not found: no tag of 'github.com/{owner}/{repo}' matches version {version}",
        )


class InstallError(ExternalError):
    """Raised when a program release cannot be downloaded or unpacked."""

    def __init__(self, program: str, version: str, reason: str):
        self.program = program
        self.version = version
        self.reason = reason
        super().__init__(f"Failed to install {program} {version}: {reason}")


class ToolExecutionError(ExternalError):
    """Raised when an installed tool exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: Optional[str] = None):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{command}' exited with status {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class VersionResolutionError(ExternalError):
    """Raised when a version cannot be resolved from the remote tags."""

    pass


class InvalidSchemaError(ValueError):
    """Raised when a CGE file does not declare a version."""

    def __init__(self, message: str = "invalid CGE file: no version field"):
        super().__init__(message)
