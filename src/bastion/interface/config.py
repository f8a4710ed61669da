"""
User configuration persistence.

Stores console settings like the default user and history size in a
JSON file next to the macro store. The file is hand-editable, so the
values that shape a session are checked before use.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

from ..state.schema import AccessLevel

logger = logging.getLogger(__name__)


class Config(TypedDict, total=False):
    """User configuration."""
    username: str  # Shown in the prompt and whoami
    access_level: str  # guest, executor, root
    history_limit: int  # Capacity of the shared history ring
    animate_banner: bool  # Show the welcome banner on startup
    interface: str  # cli or tui


DEFAULT_CONFIG: Config = {
    "username": "initiate",
    "access_level": "guest",
    "history_limit": 100,
    "animate_banner": True,
    "interface": "cli",
}


@dataclass(frozen=True)
class SessionSettings:
    """Validated values a session is opened with."""
    username: str
    access_level: AccessLevel
    history_limit: int


def get_config_path(data_dir: Path | str = "bastion_data") -> Path:
    return Path(data_dir) / ".bastion_config.json"


def load_config(data_dir: Path | str = "bastion_data") -> Config:
    """Load config from file, or return defaults if not found or unreadable."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return DEFAULT_CONFIG.copy()

    if not isinstance(saved, dict):
        logger.warning(f"Ignoring config {path}: expected a JSON object")
        return DEFAULT_CONFIG.copy()

    config = DEFAULT_CONFIG.copy()
    config.update(saved)
    return config


def save_config(config: Config, data_dir: Path | str = "bastion_data") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        logger.warning(f"Could not write config {path}: {e}")
        return False


def session_settings(config: Config) -> SessionSettings:
    """
    Read the user and history settings from a loaded config.

    Each invalid value is replaced by its default and logged.
    """
    username = config.get("username")
    if not isinstance(username, str) or not username.strip():
        logger.warning(f"Invalid username {username!r} in config, using default")
        username = DEFAULT_CONFIG["username"]

    raw_level = config.get("access_level")
    try:
        access_level = AccessLevel(raw_level)
    except ValueError:
        logger.warning(f"Invalid access_level {raw_level!r} in config, using default")
        access_level = AccessLevel(DEFAULT_CONFIG["access_level"])

    history_limit = config.get("history_limit")
    # bool is an int subclass
    if isinstance(history_limit, bool) or not isinstance(history_limit, int) or history_limit < 1:
        logger.warning(f"Invalid history_limit {history_limit!r} in config, using default")
        history_limit = DEFAULT_CONFIG["history_limit"]

    return SessionSettings(username, access_level, history_limit)
