#
# config/loader.py
#
"""
Locates and loads the eztest settings file.

Settings live under `$XDG_CONFIG_HOME/eztest` (default `~/.config/eztest`).
Files written by older releases under the `ezt` directory are still read
when the current location has none.
"""

import json
import os
from pathlib import Path
from typing import Any

import structlog

from eztest.config.models import AppSettings, RunOptions, UISettings
from eztest.exceptions import ConfigurationError
from eztest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("config.loader")

CONFIG_DIR_NAME = "eztest"
LEGACY_CONFIG_DIR_NAME = "ezt"
APP_FILE_NAME = "config.json"
STATE_FILE_NAME = "state.json"


def get_base_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_config_dir() -> Path:
    return get_base_config_dir() / CONFIG_DIR_NAME


def get_legacy_config_dir() -> Path:
    return get_base_config_dir() / LEGACY_CONFIG_DIR_NAME


def get_app_config_path() -> Path:
    return get_config_dir() / APP_FILE_NAME


def get_state_path() -> Path:
    return get_config_dir() / STATE_FILE_NAME


def resolve_readable_path(file_name: str) -> Path | None:
    """Returns the current path for `file_name`, or its legacy location, if either exists."""
    for directory in (get_config_dir(), get_legacy_config_dir()):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    return None


def _as_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key)
    if isinstance(value, bool):
        return value
    return default


def _settings_from_dict(data: dict[str, Any]) -> AppSettings:
    defaults = AppSettings()

    theme = data.get("theme")
    if not isinstance(theme, str) or not theme.strip():
        theme = defaults.theme

    run_raw = data.get("run") if isinstance(data.get("run"), dict) else {}
    ui_raw = data.get("ui") if isinstance(data.get("ui"), dict) else {}

    log_level = data.get("log_level")
    if not isinstance(log_level, str):
        log_level = defaults.log_level

    return AppSettings(
        theme=theme,
        run=RunOptions(fail_fast=_as_bool(run_raw, "fail_fast", defaults.run.fail_fast)),
        ui=UISettings(
            animations=_as_bool(ui_raw, "animations", defaults.ui.animations),
        ),
        log_level=log_level,
    )


def load_app_settings(config_path: Path | None = None) -> AppSettings:
    """
    Loads application settings.

    A missing file yields the defaults. Unreadable or malformed files raise
    ConfigurationError so the caller can report them.
    """
    path = config_path or resolve_readable_path(APP_FILE_NAME)
    if path is None or not path.is_file():
        log.debug("No settings file found, using defaults", path=str(config_path or get_app_config_path()))
        return AppSettings()

    log.debug("Loading settings", path=str(path), emoji_key="load")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid app config: {e}", path=str(path)) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read app config: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Invalid app config: top level must be an object", path=str(path))

    try:
        settings = _settings_from_dict(data)
    except ValueError as e:
        raise ConfigurationError(f"Invalid app config: {e}", path=str(path)) from e

    log.debug("Settings loaded", theme=settings.theme, fail_fast=settings.run.fail_fast)
    return settings

# 🧪⚙️
