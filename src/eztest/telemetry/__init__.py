#
# src/eztest/telemetry/__init__.py
#
"""
Logging setup and type aliases for eztest.
"""
from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🧪⚙️
