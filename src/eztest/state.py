# src/eztest/state.py
#
"""
Persisted per-project state: the last selected test files and the last
known failing test files, keyed by absolute project directory.
"""

import json
from pathlib import Path
from typing import Any

import structlog
from attrs import field, mutable

from eztest.config.loader import STATE_FILE_NAME, get_state_path, resolve_readable_path
from eztest.exceptions import StateError

log: structlog.stdlib.BoundLogger = structlog.get_logger("state")


def _clean_paths(paths: Any) -> list[str]:
    if not isinstance(paths, list):
        return []
    return [p for p in paths if isinstance(p, str)]


def _clean_mapping(raw: Any) -> dict[str, list[str]]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): _clean_paths(v) for k, v in raw.items()}


@mutable(slots=True)
class ProjectState:
    """
    In-memory copy of the state file.

    Mutable because a load-modify-save cycle updates one project entry at a
    time; every other entry must round-trip untouched.
    """

    project_selections: dict[str, list[str]] = field(factory=dict)
    project_failures: dict[str, list[str]] = field(factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "ProjectState":
        if not isinstance(data, dict):
            return cls()
        return cls(
            project_selections=_clean_mapping(data.get("project_selections")),
            project_failures=_clean_mapping(data.get("project_failures")),
        )

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {
            "project_selections": self.project_selections,
            "project_failures": self.project_failures,
        }


class StateStore:
    """Reads and writes the state file. Last writer wins."""

    def __init__(self, path: Path | None = None):
        self._path = path

    @property
    def write_path(self) -> Path:
        return self._path or get_state_path()

    def _read_path(self) -> Path | None:
        if self._path is not None:
            return self._path if self._path.is_file() else None
        return resolve_readable_path(STATE_FILE_NAME)

    def load(self) -> ProjectState:
        """Loads the state; a missing or malformed file yields an empty state."""
        path = self._read_path()
        if path is None:
            return ProjectState()

        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ProjectState()
        except OSError as e:
            log.error("Failed to read state file", path=str(path), error=str(e))
            raise StateError(f"Cannot read state file '{path}': {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            log.warning("Ignoring malformed state file", path=str(path), error=str(e))
            return ProjectState()

        return ProjectState.from_dict(data)

    def save(self, state: ProjectState) -> None:
        path = self.write_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            log.error("Failed to write state file", path=str(path), error=str(e))
            raise StateError(f"Cannot write state file '{path}': {e}") from e
        log.debug("State saved", path=str(path), emoji_key="state")

    def _load_for_update(self) -> ProjectState:
        try:
            return self.load()
        except StateError:
            return ProjectState()

    def get_project_selections(self, project_dir: str) -> list[str]:
        return list(self.load().project_selections.get(project_dir, []))

    def save_project_selections(self, project_dir: str, selections: list[str]) -> None:
        state = self._load_for_update()
        state.project_selections[project_dir] = list(selections)
        self.save(state)
        log.info("Saved project selections", project=project_dir, count=len(selections))

    def get_project_failures(self, project_dir: str) -> list[str]:
        return list(self.load().project_failures.get(project_dir, []))

    def save_project_failures(self, project_dir: str, failures: list[str]) -> None:
        """Overwrites the failing-file list for `project_dir` with a sorted, deduplicated copy."""
        state = self._load_for_update()
        state.project_failures[project_dir] = sorted(set(failures))
        self.save(state)
        log.info(
            "Saved project failures",
            project=project_dir,
            count=len(state.project_failures[project_dir]),
            emoji_key="state",
        )

# 🧪⚙️
