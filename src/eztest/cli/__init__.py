# src/eztest/cli/__init__.py
