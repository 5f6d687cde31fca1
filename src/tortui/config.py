"""Configuration management for tortui."""

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from tortui.errors import ConfigError
from tortui.keybindings import DEFAULT_KEYBINDINGS, KeyBindings

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration."""

    tick_interval: float = 0.25  # seconds between UI ticks
    update_torrent_list_interval: int = 5  # seconds
    event_queue_size: int = 32
    log_level: str = "INFO"
    log_file: str | None = None
    # Mode name -> {key sequence -> binding value}
    keybindings: dict[str, dict[str, Any]] = field(
        default_factory=lambda: copy.deepcopy(DEFAULT_KEYBINDINGS)
    )


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "tortui" / "config.yaml"


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Read the YAML config file.

    Returns:
        The parsed mapping, or None when the file is missing or empty.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        return None
    content = path.read_text()
    if not content.strip():
        return None
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader, falls back to defaults on unreadable files."""
    try:
        return read_config_file(path)
    except ConfigError as e:
        logger.warning(f"Ignoring config: {e}")
        return None


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
) -> Config:
    """Load configuration from file.

    A ``keybindings`` section replaces the built-in bindings as a whole.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.

    Returns:
        Config object with values from file or defaults.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader

    data = reader(config_path)

    if not isinstance(data, dict):
        return Config()

    keybindings = data.get("keybindings")
    if keybindings is None:
        keybindings = copy.deepcopy(DEFAULT_KEYBINDINGS)

    return Config(
        tick_interval=data.get("tick_interval", Config.tick_interval),
        update_torrent_list_interval=data.get(
            "update_torrent_list_interval", Config.update_torrent_list_interval
        ),
        event_queue_size=data.get("event_queue_size", Config.event_queue_size),
        log_level=data.get("log_level", Config.log_level),
        log_file=data.get("log_file", Config.log_file),
        keybindings=keybindings,
    )


def build_keybindings(config: Config) -> KeyBindings:
    """Build the bindings table from configuration.

    Raises:
        KeyGrammarError: If a key sequence cannot be parsed.
        ConfigError: If a mode, action or binding value is invalid.
    """
    return KeyBindings.from_config(config.keybindings)
