# src/eztest/runtime/orchestrator.py
"""
Drives one or more test runs for a project: execute, persist failing
files, report, and on an interactive terminal offer a rerun.
"""
import sys
from collections.abc import Callable
from enum import Enum, auto

import structlog

from eztest.exceptions import RunnerError, StateError
from eztest.runtime.reporter import RerunAction, ResultsReporter, prompt_rerun_action
from eztest.state import StateStore
from eztest.telemetry import StructLogger
from eztest.testing.protocols import RunOutcome, RunRequest, TestRunner
from eztest.testing.subprocess_runner import is_interactive_terminal

log: StructLogger = structlog.get_logger("runtime.orchestrator")

LAUNCH_FAILURE_EXIT_CODE = 1


class RunPhase(Enum):
    IDLE = auto()
    RUNNING = auto()
    REPORTING = auto()
    RERUN = auto()
    DONE = auto()


class RunOrchestrator:
    """
    Runs requests for one project directory.

    The runner, state store, reporter, interactivity check and prompt are
    injected so every transition can be exercised without a terminal.
    """

    def __init__(
        self,
        project_dir: str,
        runner: TestRunner,
        store: StateStore | None = None,
        reporter: ResultsReporter | None = None,
        interactive: Callable[[], bool] = is_interactive_terminal,
        prompt: Callable[[RunOutcome], RerunAction] | None = None,
    ):
        self.project_dir = project_dir
        self.runner = runner
        self.store = store or StateStore()
        self.reporter = reporter or ResultsReporter()
        self._interactive = interactive
        self._prompt = prompt or (lambda outcome: prompt_rerun_action(outcome, sys.stdin, sys.stdout))
        self.phase = RunPhase.IDLE
        self._log = log.bind(project=project_dir)

    def _transition(self, phase: RunPhase) -> None:
        self._log.debug("Run phase changed", old_phase=self.phase.name, new_phase=phase.name)
        self.phase = phase

    def _persist_failures(self, outcome: RunOutcome) -> None:
        try:
            self.store.save_project_failures(self.project_dir, list(outcome.failed_files))
        except StateError as e:
            self._log.warning("Failed to persist failed tests", error=str(e))
            self.reporter.console.print(f"Warning: failed to persist failed tests: {e}", style="yellow", markup=False)

    async def execute(self, request: RunRequest) -> tuple[int, RunOutcome | None]:
        """
        Runs once and persists the failing files.

        Returns the exit code and the outcome; the outcome is None when the
        runner could not be launched, in which case nothing is persisted.
        """
        self._transition(RunPhase.RUNNING)
        try:
            outcome = await self.runner.run_tests(request)
        except RunnerError as e:
            self._log.error("Error running mix test", error=str(e), emoji_key="fail")
            self.reporter.console.print(f"Error running mix test: {e}", style="bold red", markup=False)
            return LAUNCH_FAILURE_EXIT_CODE, None

        self._persist_failures(outcome)
        self._log.info(
            "Run finished",
            exit_code=outcome.exit_code,
            failed_files=len(outcome.failed_files),
            emoji_key="success" if outcome.success else "fail",
        )
        return outcome.exit_code, outcome

    async def run(self, request: RunRequest) -> int:
        """Executes `request`, then loops on rerun choices while interactive."""
        current = request
        while True:
            exit_code, outcome = await self.execute(current)
            if outcome is None:
                self._transition(RunPhase.DONE)
                return exit_code

            self._transition(RunPhase.REPORTING)
            self.reporter.print_results(outcome, exit_code)
            if not self._interactive():
                self._transition(RunPhase.DONE)
                return exit_code

            self._transition(RunPhase.RERUN)
            # Blocking read: the readers and the child have finished, so the loop is idle.
            action = self._prompt(outcome)
            if action is RerunAction.ALL:
                continue
            if action is RerunAction.FAILED:
                current = current.with_failed_only()
                continue

            self._transition(RunPhase.DONE)
            return exit_code

# 🧪⚙️
