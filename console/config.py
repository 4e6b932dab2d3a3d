"""
Drowsy - Configuration Manager
================================
Loads the console configuration from config.yaml, filled in with defaults
and overridden by environment variables.

Sources, lowest to highest priority:
    1. DEFAULTS below
    2. config.yaml in the project directory
    3. DROWSY_* environment variables (.env is loaded by app.py)

Usage:
    config = ConfigManager(project_dir="/path/to/drowsy").load()
    port = config["web"]["port"]
"""

import os
from typing import Any

import yaml


# Default configuration values used when config.yaml is missing or incomplete.
DEFAULTS = {
    "web": {
        "host": "0.0.0.0",
        "port": 8000,
        # false, true (default dynmap location) or a path to dynmap's web/ dir
        "serve_dynmap": False,
        "fav_icon": None,
    },
    "server": {
        "name": "Sleeping Server",
        "login_message": "The server is sleeping. Press the button to wake it up.",
        "requester_label": "A WebUser",
    },
    "process": {
        "command": "java -jar server.jar nogui",
        "cwd": ".",
        "ready_pattern": r"Done \(",
        "stop_command": "stop",
        "stop_timeout": 30,
    },
}

# Environment variable -> (section, key, type)
ENV_OVERRIDES = {
    "DROWSY_WEB_HOST": ("web", "host", str),
    "DROWSY_WEB_PORT": ("web", "port", int),
    "DROWSY_SERVER_COMMAND": ("process", "command", str),
}

DEFAULT_DYNMAP_PATH = "./plugins/dynmap/web/"

# 16x16 transparent PNG, base64, used when no fav_icon is configured
DEFAULT_FAV_ICON = (
    "iVBORw0KGgoAAAANSUhEUgAAABAAAAAQCAYAAAAf8/9hAAAAEklEQVR42mNkYPhfz0AEYBxVSF8A"
    "AIgPAQHIfu3WAAAAAElFTkSuQmCC"
)


class ConfigManager:
    """
    Reads config.yaml and merges it over DEFAULTS.

    Attributes:
        project_dir: Root directory of the Drowsy project.
        config_path: Full path to config.yaml.
    """

    def __init__(self, project_dir: str):
        self.project_dir = project_dir
        self.config_path = os.path.join(project_dir, "config.yaml")

    def load(self, environ: dict[str, str] | None = None) -> dict:
        """
        Load and merge configuration from config.yaml with defaults.

        A corrupted config file falls back to defaults; the error text is
        kept under "_config_error" for the caller to report.

        Args:
            environ: Environment mapping to read overrides from
                     (defaults to os.environ).

        Returns:
            A dictionary containing the full configuration.
        """
        config = _deep_copy(DEFAULTS)

        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f) or {}
                if not isinstance(user_config, dict):
                    raise ValueError("config.yaml must contain a mapping")
                _deep_merge(config, user_config)
            except (yaml.YAMLError, OSError, ValueError) as e:
                config["_config_error"] = str(e)

        _apply_env(config, os.environ if environ is None else environ)
        return config


def resolve_dynmap_path(config: dict, project_dir: str) -> str | None:
    """
    Work out which directory to serve under /dynmap.

    A string setting is used as given. True means the default dynmap
    location, relative to the working directory first and to the project
    directory second. Anything falsy disables dynmap.

    Returns:
        The directory path, or None when dynmap is disabled.
    """
    setting = config["web"].get("serve_dynmap")
    if not setting:
        return None
    if isinstance(setting, str):
        return setting
    if os.path.exists(DEFAULT_DYNMAP_PATH):
        return DEFAULT_DYNMAP_PATH
    return os.path.join(project_dir, "plugins", "dynmap", "web")


# -- Helper Functions ---------------------------------------------------------

def _apply_env(config: dict, environ: Any) -> None:
    for name, (section, key, cast) in ENV_OVERRIDES.items():
        value = environ.get(name)
        if value:
            try:
                config[section][key] = cast(value)
            except ValueError:
                config["_config_error"] = f"Invalid value for {name}: {value!r}"


def _deep_copy(d: dict) -> dict:
    """Create a deep copy of a nested dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    return result


def _deep_merge(base: dict, override: dict) -> None:
    """
    Recursively merge 'override' into 'base' (in-place).

    For nested dicts, values are merged recursively.
    For all other types, override replaces base.
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
