#
# src/eztest/__init__.py
#
"""
eztest: select, run and interpret Elixir test files through `mix test`.
"""

# 🧪⚙️
