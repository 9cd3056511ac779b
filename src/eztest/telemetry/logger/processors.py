# src/eztest/telemetry/logger/processors.py

"""
Custom structlog processors used by the eztest logging pipeline.
"""

import logging
from typing import Any

from structlog.typing import EventDict

LOG_EMOJIS: dict[Any, str] = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
    "run": "🧪",
    "parse": "🔎",
    "state": "💾",
    "fail": "🚫",
    "success": "🎉",
    "general": "➡️",
}

# Helper keys consumed by our processors; never rendered.
_EXTRA_KEYS = ("emoji_key",)


def add_emoji_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefixes the event with an emoji picked from `emoji_key` or the log level."""
    emoji_key = event_dict.get("emoji_key")
    if emoji_key is not None:
        emoji = LOG_EMOJIS.get(emoji_key, LOG_EMOJIS["general"])
    else:
        level = logging.getLevelName(str(event_dict.get("level", "info")).upper())
        emoji = LOG_EMOJIS.get(level, "")
    event = event_dict.get("event")
    if emoji and isinstance(event, str):
        event_dict["event"] = f"{emoji} {event}"
    return event_dict


def remove_extra_keys_processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key in _EXTRA_KEYS:
        event_dict.pop(key, None)
    return event_dict

# 🧪⚙️
