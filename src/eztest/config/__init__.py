#
# config/__init__.py
#
"""
Configuration handling sub-package for eztest.

Exports the loading function, path helpers and the settings models.
"""

from .loader import (
    get_app_config_path,
    get_state_path,
    load_app_settings,
)
from .models import AppSettings, RunOptions, UISettings

__all__ = [
    "AppSettings",
    "RunOptions",
    "UISettings",
    "get_app_config_path",
    "get_state_path",
    "load_app_settings",
]

# 🧪⚙️
