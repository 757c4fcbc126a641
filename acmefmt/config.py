"""
Configuration — loads settings from .acmefmt.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import copy
import os

import yaml

from .formatters import DEFAULT_FORMATTERS


_DEFAULTS = {
    "mount": os.path.join("~", "mnt", "acme"),
    "diff_command": "",
    "log_level": "INFO",
    "log_dir": "",
    "metrics_file": "",
    "after_save": [],
    "debounce_seconds": 0.5,
}

# Config file search locations
_CONFIG_FILENAMES = [".acmefmt.yaml", ".acmefmt.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _as_command(value) -> list[str]:
    """Normalise a hook entry (``"cmd arg"`` or ``[cmd, arg]``) to argv."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return []


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables
    3. .acmefmt.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        self.MOUNT = os.path.expanduser(
            _get("ACMEFMT_MOUNT", "mount", _DEFAULTS["mount"]))
        self.DIFF_COMMAND = _get("ACMEFMT_DIFF_COMMAND", "diff_command",
                                 _DEFAULTS["diff_command"])
        self.LOG_LEVEL = _get("ACMEFMT_LOG_LEVEL", "log_level",
                              _DEFAULTS["log_level"]).upper()
        self.LOG_DIR = _get("ACMEFMT_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])
        self.METRICS_FILE = _get("ACMEFMT_METRICS_FILE", "metrics_file",
                                 _DEFAULTS["metrics_file"])
        self.DEBOUNCE_SECONDS = _get("ACMEFMT_DEBOUNCE", "debounce_seconds",
                                     _DEFAULTS["debounce_seconds"], cast=float)

        # Formatters: YAML entries override or extend the defaults
        self.FORMATTERS: dict[str, dict] = copy.deepcopy(DEFAULT_FORMATTERS)
        formatters_section = yd.get("formatters", {})
        if isinstance(formatters_section, dict):
            for ext, entry in formatters_section.items():
                if isinstance(entry, str):
                    entry = {"command": entry}
                if isinstance(entry, dict):
                    self.FORMATTERS[str(ext).lstrip(".")] = dict(entry)

        # Commands run after a save the formatter left alone
        self.AFTER_SAVE: list[list[str]] = []
        hooks = yd.get("after_save", _DEFAULTS["after_save"])
        if isinstance(hooks, str):
            hooks = [hooks]
        if isinstance(hooks, list):
            for hook in hooks:
                argv = _as_command(hook)
                if argv:
                    self.AFTER_SAVE.append(argv)

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
