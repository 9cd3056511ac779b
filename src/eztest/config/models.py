#
# config/models.py
#
"""
Attrs-based data models for eztest application settings.
"""

import logging
from typing import Any

from attrs import define, field


def _validate_theme(inst: Any, attr: Any, value: str) -> None:
    """Validator ensures the theme name is a non-empty string."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Field '{attr.name}' must be a non-empty string, got {value!r}")


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


@define(frozen=True, slots=True)
class RunOptions:
    """Options threaded into every test run."""
    fail_fast: bool = field(default=False)


@define(frozen=True, slots=True)
class UISettings:
    """Display preferences."""
    animations: bool = field(default=True)


@define(frozen=True, slots=True)
class AppSettings:
    """Root settings object loaded from `config.json`."""
    theme: str = field(default="default", converter=lambda v: str(v).strip().lower(), validator=_validate_theme)
    run: RunOptions = field(factory=RunOptions)
    ui: UISettings = field(factory=UISettings)
    log_level: str = field(default="WARNING", validator=_validate_log_level)

# 🧪⚙️
