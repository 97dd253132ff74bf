"""Configuration and standard directories for the codegame tools."""

import configparser
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

APP_NAME = "codegame"

logger = logging.getLogger(__name__)


def _xdg_dir(env_var: str, *fallback: str) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value)
    return Path(os.path.expanduser("~")).joinpath(*fallback)


def default_cache_dir() -> Path:
    return _xdg_dir("XDG_CACHE_HOME", ".cache") / APP_NAME


def default_data_dir() -> Path:
    return _xdg_dir("XDG_DATA_HOME", ".local", "share") / APP_NAME


def default_config_dir() -> Path:
    if platform.system() == "Darwin" and not os.environ.get("XDG_CONFIG_HOME"):
        return Path("~/Library/Application Support/codegame").expanduser()
    return _xdg_dir("XDG_CONFIG_HOME", ".config") / APP_NAME


@dataclass(frozen=True)
class Dirs:
    """
    Directories used by the fetch cache, the installer and the config file.

    Components take a ``Dirs`` instance at construction instead of reading
    module level paths, so tests can point everything at a temporary directory:

        dirs = Dirs(cache_dir=tmp / "cache", data_dir=tmp / "data", config_dir=tmp / "cfg")
    """

    cache_dir: Path
    data_dir: Path
    config_dir: Path

    @classmethod
    def default(cls) -> "Dirs":
        return cls(
            cache_dir=default_cache_dir(),
            data_dir=default_data_dir(),
            config_dir=default_config_dir(),
        )

    @property
    def github_cache_dir(self) -> Path:
        return self.cache_dir / "github_requests"

    @property
    def bin_dir(self) -> Path:
        return self.data_dir / "bin"

    @property
    def cg_gen_events_dir(self) -> Path:
        return self.bin_dir / "cg-gen-events"

    @property
    def config_file(self) -> Path:
        return self.config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for the configuration file.

    Missing sections or keys are handled gracefully.

    Usage:
        config = ConfigAccessor()
        value = config.get('codegame', 'share_url', default='share.code-game.org')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = Dirs.default().config_file
        else:
            self.config_path = Path(config_path)

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            try:
                self.config.read(self.config_path)
            except configparser.Error as e:
                logger.warning(
                    f"Failed to parse config file {self.config_path}: {e}. Using defaults."
                )
                self.config = configparser.ConfigParser()

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)

        self.config[section][key] = value

    def save(self) -> None:
        """
        Save the current configuration to the config file.

        Fails gracefully if the file cannot be written (e.g., read-only filesystem).
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as configfile:
                self.config.write(configfile)
        except OSError as e:
            logger.warning(
                f"Could not save configuration to {self.config_path}: {e}. "
                "Configuration changes will not persist."
            )

    def sections(self) -> list:
        return self.config.sections()

    def options(self, section: str) -> list:
        """
        Get all options (keys) in a section.

        Returns:
            List of options in the section or empty list if section doesn't exist
        """
        try:
            return self.config.options(section)
        except configparser.NoSectionError:
            return []


DEFAULT_SHARE_URL = "share.code-game.org"
DEFAULT_DEV_PORT = 8080


@dataclass
class Config:
    """User settings for the codegame tools."""

    # The codegame-share instance to use.
    share_url: str = DEFAULT_SHARE_URL
    # The port to use for `codegame run`.
    dev_port: int = DEFAULT_DEV_PORT

    def save(self, accessor: Optional[ConfigAccessor] = None) -> None:
        """Write all fields back to the config file."""
        if accessor is None:
            accessor = ConfigAccessor()
        accessor.set(APP_NAME, "share_url", self.share_url)
        accessor.set(APP_NAME, "dev_port", str(self.dev_port))
        accessor.save()


def load_config(accessor: Optional[ConfigAccessor] = None) -> Config:
    """
    Read the config file and return a Config with unset fields set to their default.

    Args:
        accessor: Accessor to read from (defaults to the standard config file)

    Returns:
        Config object
    """
    if accessor is None:
        accessor = ConfigAccessor()

    config = Config()
    config.share_url = accessor.get(APP_NAME, "share_url", default=DEFAULT_SHARE_URL)

    dev_port = accessor.get(APP_NAME, "dev_port")
    if dev_port is not None:
        try:
            config.dev_port = int(dev_port)
        except ValueError:
            logger.warning(
                f"Invalid dev_port '{dev_port}' in {accessor.config_path}. "
                f"Using {DEFAULT_DEV_PORT}."
            )

    return config
