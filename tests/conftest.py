import os
import stat
from pathlib import Path

import pytest

from eztest.state import StateStore
from eztest.styles import apply_theme
from eztest.testing.estimator import clear_test_count_cache


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Points every config/state lookup at a throwaway directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for var in ("EZT_FAIL_FAST", "EZT_CONF", "EZT_LOG_LEVEL", "EZT_LOG_FILE", "EZT_JSON_LOGS"):
        monkeypatch.delenv(var, raising=False)
    apply_theme("default")
    clear_test_count_cache()
    return home / ".config"


@pytest.fixture
def state_store() -> StateStore:
    return StateStore()


@pytest.fixture
def fake_mix(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Installs a shell script named `mix` at the front of PATH."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def install(body: str) -> Path:
        script = bin_dir / "mix"
        script.write_text("#!/bin/sh\n" + body)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
        return script

    return install
