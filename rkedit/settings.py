"""User settings for the editor.

Settings are read from a JSON file in the OS-appropriate config directory
(or a path given on the command line). Missing files mean defaults; invalid
files or values are logged and ignored so a bad config never blocks editing.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants
from .keyboard import BACKENDS

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"


@dataclass
class Settings:
    """Editor configuration with defaults for every key."""
    input_backend: str = "bytes"
    escape_timeout: float = EditorConstants.ESCAPE_SEQUENCE_TIMEOUT
    poll_timeout: float = EditorConstants.INPUT_POLL_TIMEOUT
    mouse: bool = False
    log_file: Optional[str] = None
    keybindings: Dict[str, str] = field(default_factory=dict)


def default_settings_path() -> Path:
    """Path of the settings file in the user's config directory."""
    return Path(platformdirs.user_config_dir("rkedit")) / SETTINGS_FILE_NAME


def validate_setting(key: str, value: Any) -> bool:
    """Check a single setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if the key is known and the value has an acceptable type/range.
    """
    if key == 'input_backend':
        return value in BACKENDS
    if key in ('escape_timeout', 'poll_timeout'):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return False
        lowest_ok = value > 0 if key == 'poll_timeout' else value >= 0
        return lowest_ok and value <= 10
    if key == 'mouse':
        return isinstance(value, bool)
    if key == 'log_file':
        return value is None or isinstance(value, str)
    if key == 'keybindings':
        return isinstance(value, dict) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        )
    return False


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from path, or from the default location.

    Returns:
        Settings with every valid value from the file applied over defaults.
    """
    settings_file = Path(path) if path else default_settings_path()
    settings = Settings()

    if not settings_file.exists():
        if path:
            logger.warning(f"Settings file {settings_file} does not exist, using defaults")
        return settings

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load settings from {settings_file}: {e}")
        return settings

    if not isinstance(data, dict):
        logger.warning("Settings file has invalid format (not a dict), ignoring")
        return settings

    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Unknown setting {key!r}, ignoring")
            continue
        if not validate_setting(key, value):
            logger.warning(f"Invalid value for setting {key!r}: {value!r}, ignoring")
            continue
        setattr(settings, key, float(value) if key.endswith('_timeout') else value)

    return settings
