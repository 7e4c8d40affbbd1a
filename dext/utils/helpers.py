"""
Helper utilities for the Dext engine.

Provides common functions used across the package:
- Settings loading (TOML, deep-merged over defaults)
- Logging setup for the command line
- Dotted-path lookups into nested item payloads
"""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

from dext import constants


DEFAULT_SETTINGS: Dict[str, Any] = {
    "search": {
        "max_results": constants.MAX_RESULTS,
        "debounce_ms": constants.DEBOUNCE_MS,
        "relevance_threshold": constants.RELEVANCE_THRESHOLD,
        "isolate_failures": False,
        "drop_stale_results": True,
    },
    "cache": {
        "path": str(constants.CACHE_PATH),
    },
    "plugins": {
        "core": ["commands", "web_search", "calculator"],
        "user": [],
        "commands_file": str(constants.COMMANDS_PATH),
    },
    "web_search": {},
}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load engine settings from a TOML file.

    Args:
        path: Settings file; defaults to ~/.config/dext/settings.toml

    Returns:
        Dictionary containing settings with defaults applied

    Example settings structure:
        [search]
        max_results = 10
        debounce_ms = 100

        [plugins]
        core = ["commands", "calculator"]
        user = ["my_plugins.notes:NotesPlugin"]
    """
    defaults = copy.deepcopy(DEFAULT_SETTINGS)
    settings_path = Path(path) if path else constants.SETTINGS_PATH

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def setup_logging(level: str = "WARNING") -> None:
    """Replace loguru's default sink with a stderr sink at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def get_own_prop(obj: Any, dotted: str, default: Any = None) -> Any:
    """
    Walk a dotted path through nested mappings and attributes.

    Example:
        get_own_prop(message, "item.mods.cmd.arg")
    """
    current = obj
    for part in dotted.split("."):
        if isinstance(current, dict):
            if part not in current:
                return default
            current = current[part]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            return default
    return current
