"""Configuration for MangaBind.

Settings live in ``~/.mangabind/config.json``. Values read from the file
are coerced to the type of their default; a value that cannot be coerced
is replaced by the default.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .models import ExportSettings, DEFAULT_CACHE_ROOT, DEFAULT_LANGUAGE, DEFAULT_OPERATOR

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "output_directory": str(Path.cwd() / "output"),
    "cache_root": DEFAULT_CACHE_ROOT,
    "operator": DEFAULT_OPERATOR,
    "language": DEFAULT_LANGUAGE,
    "max_attempts": 3,
    "timeout": 30,
}

CONFIG_DIR = Path.home() / ".mangabind"
CONFIG_FILE = CONFIG_DIR / "config.json"


def coerce_value(key: str, value: Any) -> Any:
    """Convert a value to the type of the key's default.

    Args:
        key: A key of DEFAULT_CONFIG.
        value: Value read from the file or given on the command line.

    Returns:
        The converted value.

    Raises:
        KeyError: If the key has no default.
        ValueError: If the value cannot be converted.
    """
    default = DEFAULT_CONFIG[key]
    if isinstance(default, int):
        if isinstance(value, bool):
            raise ValueError(f"{key} must be an integer, got {value!r}")
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"{key} must be an integer, got {value!r}") from None
        if number < 1:
            raise ValueError(f"{key} must be at least 1, got {number}")
        return number
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string, got {value!r}")
    return value


def _write_config(config: Dict[str, Any]) -> bool:
    try:
        CONFIG_DIR.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(config, f, indent=2)
        os.chmod(CONFIG_FILE, 0o600)
    except OSError as e:
        logger.error(f"Could not write {CONFIG_FILE}: {e}")
        return False
    logger.debug(f"Config written to {CONFIG_FILE}")
    return True


def load_config() -> Dict[str, Any]:
    """Read the settings, repairing missing or badly typed values.

    Returns:
        Dict[str, Any]: One value per DEFAULT_CONFIG key.
    """
    if not CONFIG_FILE.exists():
        logger.info(f"No config at {CONFIG_FILE}, writing defaults")
        _write_config(DEFAULT_CONFIG)
        return DEFAULT_CONFIG.copy()

    try:
        with open(CONFIG_FILE, "r") as f:
            stored = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.error(f"Could not read {CONFIG_FILE}: {e}")
        logger.info("Using default configuration")
        return DEFAULT_CONFIG.copy()

    if not isinstance(stored, dict):
        logger.warning(f"{CONFIG_FILE} does not hold an object, using defaults")
        return DEFAULT_CONFIG.copy()

    config = {}
    repaired = False
    for key, default in DEFAULT_CONFIG.items():
        if key not in stored:
            config[key] = default
            repaired = True
            continue
        try:
            config[key] = coerce_value(key, stored[key])
        except ValueError as e:
            logger.warning(f"Ignoring {key} in {CONFIG_FILE}: {e}. Using {default!r}")
            config[key] = default
            repaired = True

    if repaired:
        _write_config(config)
    return config


class Config:
    """Settings of the current user."""

    def __init__(self):
        self._config = load_config()

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Store one value, converted to the type of its default.

        Raises:
            KeyError: If the key is unknown.
            ValueError: If the value cannot be converted.

        Returns:
            bool: True if the file was written.
        """
        self._config[key] = coerce_value(key, value)
        return _write_config(self._config)

    def reset(self) -> bool:
        """Go back to the default values."""
        self._config = DEFAULT_CONFIG.copy()
        return _write_config(self._config)

    def items(self):
        return self._config.items()

    def get_output_dir(self) -> str:
        """Directory receiving packaged files, created if missing."""
        output_dir = self.get("output_directory")
        os.makedirs(output_dir, exist_ok=True)
        return output_dir

    def export_settings(self) -> ExportSettings:
        """Build the settings used by an export session."""
        return ExportSettings(
            operator=self._config["operator"],
            language=self._config["language"],
            cache_root=self._config["cache_root"],
            max_attempts=self._config["max_attempts"],
            timeout=self._config["timeout"],
        )
