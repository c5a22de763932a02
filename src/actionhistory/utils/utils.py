# actionhistory/utils/utils.py
"""
actionhistory.utils.utils
=========================

Configuration helpers for the actionhistory package.

Key functionalities include:
- Automatic User Configuration: creates `config.toml` and `.env` templates in
  `~/.config/actionhistory` on first run.
- Layered Configuration Loading: starts from the embedded `DEFAULT_CONFIG` and
  recursively merges user settings from TOML on top of it.
- Validation of the `[history]` section into manager keyword arguments.

The package is always runnable, even if the user configuration is missing or
corrupted, by falling back to the embedded defaults.
"""

import copy
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

logger = logging.getLogger("actionhistory")

CONFIG_DIR = Path.home() / ".config" / "actionhistory"

ENV_TEMPLATE = """# Environment for actionhistory
# Set to 1 to write every execute/undo/redo to lifecycle.log
ACTIONHISTORY_TRACE=
"""

# Hardcoded mirror of the repository's `config.toml`; the ultimate fallback.
DEFAULT_CONFIG: Dict[str, Any] = {
    "history": {"max_history_size": 50},
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": True,
        "separate_error_log": False,
        "log_file": "actionhistory.log",
    },
}


def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[3]


def ensure_user_config_exists(config_dir: Path = CONFIG_DIR) -> None:
    """Creates the user config files in `config_dir` when they are missing."""
    try:
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Loads the embedded defaults and merges a TOML file over them.

    Args:
        path: Explicit config file. When omitted, the user config in
            `~/.config/actionhistory/config.toml` is used (and created from the
            template if needed).

    Returns:
        The merged configuration. Unreadable files leave the defaults in place.
    """
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    if path is None:
        ensure_user_config_exists()
        config_path = CONFIG_DIR / "config.toml"
    else:
        config_path = Path(path)

    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged config from {config_path}")
        except Exception as e:
            logger.error(f"Could not parse config '{config_path}': {e}. Using defaults.")

    return final_config


def get_history_options(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extracts `ActionHistoryManager` keyword arguments from `config`.

    Raises:
        ValueError: If `max_history_size` is not an integer greater than zero.
    """
    section = config.get("history", {}) if isinstance(config, dict) else {}
    size = section.get("max_history_size", DEFAULT_CONFIG["history"]["max_history_size"])
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(
            f"[history] max_history_size must be a positive integer, got {size!r}"
        )
    return {"max_history_size": size}


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
