"""Read-only configuration resolution for itemfetch.

Configuration is resolved once per invocation into a frozen
:class:`~itemfetch.models.AppConfig` and handed to the client. Layers, from
lowest to highest precedence:

* built-in defaults on the pydantic models
* the user file ``config.json`` in :func:`get_config_dir`
* the project file ``./itemfetch.json``
* ``ITEMFETCH_*`` environment variables
* CLI flags

Files are never written by itemfetch; edit them by hand. Nothing reads
configuration from shared state after :func:`resolve_config` returns.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from itemfetch.exceptions import ConfigError
from itemfetch.models import AppConfig

_APP_NAME = "itemfetch"
_USER_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "itemfetch.json"

# Environment variable -> (section, field) in AppConfig.
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "ITEMFETCH_BASE_URL": ("request", "base_url"),
    "ITEMFETCH_TIMEOUT": ("request", "timeout"),
    "ITEMFETCH_RETRY_COUNT": ("request", "retry_count"),
    "ITEMFETCH_CACHE_ENABLED": ("request", "cache_enabled"),
    "ITEMFETCH_CACHE_TTL": ("cache", "ttl_seconds"),
}

# XDG variable and its default under $HOME, per directory kind.
_XDG_DIRS: dict[str, tuple[str, str]] = {
    "config": ("XDG_CONFIG_HOME", ".config"),
    "data": ("XDG_DATA_HOME", ".local/share"),
}


def _is_xdg_platform() -> bool:
    """Return True on Linux and the BSDs, which use XDG base directories."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    if not _is_xdg_platform():
        return Path.home() / f".{_APP_NAME}"
    env_var, default = _XDG_DIRS[kind]
    root = os.environ.get(env_var) or str(Path.home() / default)
    return Path(root) / _APP_NAME


def get_config_dir() -> Path:
    """Directory holding the user ``config.json``.

    ``$XDG_CONFIG_HOME/itemfetch`` on Linux/BSD, ``~/.itemfetch`` elsewhere.
    The directory is not created.
    """
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``$XDG_DATA_HOME/itemfetch`` on Linux/BSD, ``~/.itemfetch`` elsewhere.
    The directory is not created.
    """
    return _app_dir("data")


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    """Parse *path* as a JSON object, or return None if it does not exist."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_user_config() -> Optional[dict[str, Any]]:
    """Raw contents of the user ``config.json``, or None when absent.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    return _read_json_object(get_config_dir() / _USER_CONFIG_FILENAME, "user config")


def load_project_config() -> Optional[dict[str, Any]]:
    """Raw contents of ``./itemfetch.json``, or None when absent.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, (section, field) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            overrides.setdefault(section, {})[field] = value
    return overrides


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_retry_count: Optional[int] = None,
    cli_cache_enabled: Optional[bool] = None,
) -> AppConfig:
    """Merge every configuration layer into one frozen :class:`AppConfig`.

    Precedence (high to low): CLI flags, ``ITEMFETCH_*`` environment
    variables, ``./itemfetch.json``, the user ``config.json``, defaults.
    Layers are merged before validation, so a file may set only the fields
    it cares about.

    Raises:
        ConfigError: If a file is unreadable or the merged result is invalid.
    """
    cli = {
        name: value
        for name, value in (
            ("base_url", cli_base_url),
            ("timeout", cli_timeout),
            ("retry_count", cli_retry_count),
            ("cache_enabled", cli_cache_enabled),
        )
        if value is not None
    }

    data: dict[str, Any] = {}
    for layer in (load_user_config(), load_project_config(), _env_overrides(), {"request": cli}):
        if layer:
            data = _deep_merge(data, layer)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
