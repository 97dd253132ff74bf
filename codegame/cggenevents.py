"""
cg-gen-events integration: version resolution, installation and execution,
plus extraction of the version field from CGE files.
"""

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from codegame.config import Dirs
from codegame.external.cache import GithubCache
from codegame.external.exceptions import (
    DecodeError,
    ExternalError,
    InvalidSchemaError,
    ToolExecutionError,
    VersionResolutionError,
)
from codegame.external.github import latest_tag, tag_for_version
from codegame.external.install import GithubReleaseInstaller, Installer
from codegame.versioning import resolved_version, strip_tag_prefix

logger = logging.getLogger(__name__)

GITHUB_OWNER = "code-game-project"
PROGRAM_NAME = "cg-gen-events"
REPOSITORY_URL = f"https://github.com/{GITHUB_OWNER}/{PROGRAM_NAME}"


class EventDefinition(BaseModel):
    name: str


class EventsDocument(BaseModel):
    """Subset of the JSON document cg-gen-events writes with `-l json`."""

    events: Optional[List[EventDefinition]] = None
    commands: Optional[List[EventDefinition]] = None


def latest_cge_version(cache: Optional[GithubCache] = None) -> str:
    """
    Return the latest CGE version in the format 'x.y'.

    Raises:
        VersionResolutionError: If the latest tag cannot be determined
    """
    try:
        tag = latest_tag(GITHUB_OWNER, PROGRAM_NAME, cache)
    except ExternalError as e:
        raise VersionResolutionError(
            f"Couldn't determine the latest CGE version: {e}"
        ) from e
    return resolved_version(tag)


def install_cg_gen_events(
    cge_version: str,
    dirs: Optional[Dirs] = None,
    cache: Optional[GithubCache] = None,
    installer: Optional[Installer] = None,
) -> str:
    """
    Install the cg-gen-events release matching ``cge_version`` if necessary.

    Args:
        cge_version: CGE version, e.g. '0.4'
        dirs: Directories to use (defaults to the XDG locations)
        cache: Cache used for the tag lookup
        installer: Installer collaborator (defaults to GithubReleaseInstaller)

    Returns:
        Name of the executable inside ``dirs.cg_gen_events_dir``
    """
    dirs = dirs or Dirs.default()
    installer = installer or GithubReleaseInstaller()

    tag = tag_for_version(GITHUB_OWNER, PROGRAM_NAME, cge_version, cache)
    version = strip_tag_prefix(tag)
    return installer.install(
        PROGRAM_NAME, PROGRAM_NAME, REPOSITORY_URL, version, dirs.cg_gen_events_dir
    )


def cg_gen_events(
    cge_version: str,
    output_dir: str,
    cge_path: str,
    languages: str,
    dirs: Optional[Dirs] = None,
    cache: Optional[GithubCache] = None,
    installer: Optional[Installer] = None,
) -> subprocess.CompletedProcess:
    """
    Install the correct version of cg-gen-events and run it.

    ``cge_path`` can be a file path or a URL starting with http:// or https://.
    """
    dirs = dirs or Dirs.default()
    exe_name = install_cg_gen_events(cge_version, dirs, cache, installer)

    command = [
        str(dirs.cg_gen_events_dir / exe_name),
        cge_path,
        "-l",
        languages,
        "-o",
        str(output_dir),
    ]
    logger.debug(f"Running {' '.join(command)}")
    ret = subprocess.run(command, text=True, capture_output=True, check=False)
    if ret.returncode != 0:
        raise ToolExecutionError(" ".join(command), ret.returncode, ret.stderr)
    return ret


def get_event_names(
    url: str,
    cge_version: str,
    dirs: Optional[Dirs] = None,
    cache: Optional[GithubCache] = None,
    installer: Optional[Installer] = None,
) -> Tuple[List[str], List[str]]:
    """
    List the event and command names of the game server at ``url``.

    Only works for CGE versions >= 0.3.

    Returns:
        Tuple of (event_names, command_names)

    Raises:
        DecodeError: If the generated events.json has an unexpected structure
    """
    output_dir = tempfile.gettempdir()
    cg_gen_events(cge_version, output_dir, url, "json", dirs, cache, installer)

    path = Path(output_dir) / "events.json"
    try:
        with open(path, "rb") as f:
            document = EventsDocument.model_validate_json(f.read())
    except ValidationError as e:
        raise DecodeError(str(path), str(e)) from e
    finally:
        if path.exists():
            os.remove(path)

    event_names = [event.name for event in document.events or []]
    command_names = [command.name for command in document.commands or []]
    return event_names, command_names


_WHITESPACE = (" ", "\r", "\n", "\t")
_COMMENT_MARKERS = ("/*", "*/", "//")


def parse_cge_version(cge: str) -> str:
    """
    Return the token following the 'version' keyword of a CGE file.

    Leading whitespace, line comments and (nested) block comments are skipped
    before the text is split into words. A line comment runs to the end of the
    line even inside a block comment. An unterminated block comment swallows
    the rest of the input, which then has no version field.

    Raises:
        InvalidSchemaError: If no 'version <token>' pair is found
    """
    index = 0
    depth = 0
    length = len(cge)
    while index < length:
        pair = cge[index : index + 2]
        if depth == 0 and cge[index] not in _WHITESPACE and pair not in _COMMENT_MARKERS:
            break

        if pair == "//":
            while index < length and cge[index] != "\n":
                index += 1
            continue
        if pair == "/*":
            depth += 1
            index += 2
            continue
        if pair == "*/":
            depth = max(depth - 1, 0)
            index += 2
            continue
        index += 1

    words = cge[index:].split()
    for i, word in enumerate(words[:-1]):
        if word == "version":
            return words[i + 1]

    raise InvalidSchemaError()
