# src/eztest/styles.py
"""
Colour palettes shared by the live progress line and the results screen.
"""
from attrs import define

import structlog

log = structlog.get_logger("styles")


@define(frozen=True, slots=True)
class Palette:
    primary: str
    secondary: str
    muted: str
    text: str
    dim_text: str
    border: str
    error: str

    @property
    def title(self) -> str:
        return f"bold {self.primary}"

    @property
    def status(self) -> str:
        return f"bold {self.secondary}"

    @property
    def failure(self) -> str:
        return f"bold {self.error}"


THEMES: dict[str, Palette] = {
    "default": Palette(
        primary="#7C3AED",
        secondary="#10B981",
        muted="#6B7280",
        text="#F9FAFB",
        dim_text="#9CA3AF",
        border="#374151",
        error="#EF4444",
    ),
    "gruvbox": Palette(
        primary="#D79921",
        secondary="#98971A",
        muted="#928374",
        text="#EBDBB2",
        dim_text="#A89984",
        border="#504945",
        error="#CC241D",
    ),
}

_active: Palette = THEMES["default"]


def apply_theme(name: str) -> Palette:
    """Activates a named palette; unknown names fall back to the default."""
    global _active
    palette = THEMES.get(name.strip().lower())
    if palette is None:
        log.warning("Unknown theme, using default", theme=name)
        palette = THEMES["default"]
    _active = palette
    return palette


def current_palette() -> Palette:
    return _active

# 🧪⚙️
