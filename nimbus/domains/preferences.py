"""Persistent user preferences for nimbus.

Stored as JSON next to the default config file:
~/.config/nimbus/preferences.json
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "nimbus"
PREFERENCES_FILE = CONFIG_DIR / "preferences.json"

# Keys understood by the rest of nimbus
CONFIG_PATH_KEY = "config_path"


def _read() -> Dict[str, Any]:
    """Return stored preferences, or an empty dict if none can be read."""
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        with open(PREFERENCES_FILE, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {PREFERENCES_FILE}: expected a JSON object")
        return {}
    return data


def _write(preferences: Dict[str, Any]) -> None:
    PREFERENCES_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2)


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for key, or None."""
    return _read().get(key)


def set_preference(key: str, value: str) -> None:
    """Store value under key, replacing any previous value."""
    preferences = _read()
    preferences[key] = value
    _write(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove key. Clearing a key that is not set is a no-op."""
    preferences = _read()
    if key not in preferences:
        logger.debug(f"Preference '{key}' not set, nothing to clear")
        return

    del preferences[key]
    _write(preferences)
    logger.info(f"Preference '{key}' cleared")


def get_all_preferences() -> Dict[str, Any]:
    """Return every stored preference."""
    return _read()
