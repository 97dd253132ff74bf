"""
Installation of program releases published on GitHub.

Release archives are expected at

    {repo_url}/releases/download/v{version}/{binary}-{os}-{arch}.tar.gz

(.zip on Windows) and contain the executable ``{binary}`` somewhere inside.
The executable is stored as ``{install_dir}/{binary}-{version}``.
"""

import io
import logging
import os
import platform
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Optional, Protocol

import requests
from filelock import FileLock

from codegame.external.exceptions import InstallError

logger = logging.getLogger(__name__)

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


class Installer(Protocol):
    def install(
        self,
        program_name: str,
        binary_name: str,
        repo_url: str,
        version: str,
        install_dir: Path,
    ) -> str:
        """Make ``version`` of a program available in ``install_dir`` and return the executable name."""
        ...


def platform_names() -> tuple:
    """Return (os, arch) in the naming used by release archives, e.g. ('linux', 'amd64')."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return system, _ARCH_NAMES.get(machine, machine)


def executable_name(binary_name: str, version: str) -> str:
    name = f"{binary_name}-{version}"
    if platform.system() == "Windows":
        name += ".exe"
    return name


def release_archive_url(repo_url: str, binary_name: str, version: str) -> str:
    system, arch = platform_names()
    ext = "zip" if system == "windows" else "tar.gz"
    return f"{repo_url.rstrip('/')}/releases/download/v{version}/{binary_name}-{system}-{arch}.{ext}"


def _extract_binary(archive: bytes, url: str, binary_name: str) -> Optional[bytes]:
    wanted = {binary_name, binary_name + ".exe"}
    if url.endswith(".zip"):
        with zipfile.ZipFile(io.BytesIO(archive)) as f:
            for member in f.infolist():
                if not member.is_dir() and Path(member.filename).name in wanted:
                    return f.read(member)
        return None

    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as f:
        for member in f.getmembers():
            if member.isfile() and Path(member.name).name in wanted:
                extracted = f.extractfile(member)
                if extracted is not None:
                    return extracted.read()
    return None


class GithubReleaseInstaller:
    """
    Download and unpack GitHub release archives, once per program version.

    Args:
        session: requests session used for downloads
        timeout: Download timeout in seconds
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def install(
        self,
        program_name: str,
        binary_name: str,
        repo_url: str,
        version: str,
        install_dir: Path,
    ) -> str:
        install_dir = Path(install_dir)
        install_dir.mkdir(parents=True, exist_ok=True)
        exe_name = executable_name(binary_name, version)
        exe_path = install_dir / exe_name

        lock = exe_path.with_name(exe_name + ".lock")
        with FileLock(lock):
            if exe_path.exists():
                logger.debug(f"{program_name} {version} already installed at {exe_path}")
                return exe_name

            url = release_archive_url(repo_url, binary_name, version)
            logger.info(f"Installing {program_name} {version}...")
            logger.debug(f"Downloading {url}")
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise InstallError(program_name, version, str(e)) from e

            try:
                binary = _extract_binary(response.content, url, binary_name)
            except (tarfile.TarError, zipfile.BadZipFile) as e:
                raise InstallError(program_name, version, f"invalid archive: {e}") from e
            if binary is None:
                raise InstallError(
                    program_name, version, f"'{binary_name}' not found in {url}"
                )

            tmp_path = exe_path.with_name(exe_name + ".part")
            tmp_path.write_bytes(binary)
            mode = tmp_path.stat().st_mode
            tmp_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            os.replace(tmp_path, exe_path)

            logger.info(f"Installed {program_name} {version} to {exe_path}")

        return exe_name
