# src/eztest/cli/run_cmds.py

import asyncio
import os
from pathlib import Path

import click
import structlog
from rich.console import Console

from eztest.cli.utils import load_settings_or_defaults, logging_options, setup_logging_from_context
from eztest.config import RunOptions
from eztest.exceptions import StateError
from eztest.runtime.orchestrator import RunOrchestrator
from eztest.runtime.reporter import ResultsReporter
from eztest.state import StateStore
from eztest.telemetry import StructLogger
from eztest.testing.protocols import RunRequest
from eztest.testing.subprocess_runner import MixTestRunner, is_interactive_terminal

log: StructLogger = structlog.get_logger("cli.run")


def _run_orchestrator(orchestrator: RunOrchestrator, request: RunRequest) -> int:
    try:
        return asyncio.run(orchestrator.run(request))
    except KeyboardInterrupt:
        log.warning("Run interrupted by KeyboardInterrupt (CTRL-C).")
        return 130


def _resolve_files(
    ctx: click.Context,
    store: StateStore,
    project_dir: str,
    files: tuple[str, ...],
    saved: bool,
) -> list[str]:
    if not saved:
        selected = list(files)
        if selected:
            try:
                store.save_project_selections(project_dir, selected)
            except StateError as e:
                click.echo(f"Warning: failed to save selection: {e}", err=True)
        return selected

    try:
        selections = store.get_project_selections(project_dir)
    except StateError as e:
        click.echo(f"Error loading saved tests: {e}", err=True)
        ctx.exit(1)
    if not selections:
        click.echo("No tests saved. Run 'ezt run <files>' first to select tests.", err=True)
        ctx.exit(1)
    return selections


@click.command(name="run")
@click.argument("files", nargs=-1, type=click.Path(dir_okay=False))
@click.option("-r", "--saved", is_flag=True, help="Run the saved selection for this project.")
@click.option(
    "-f",
    "--failed",
    "failed_only",
    is_flag=True,
    help="Run previously failing tests (mix test --failed).",
)
@click.option(
    "--fail-fast/--no-fail-fast",
    default=None,
    envvar="EZT_FAIL_FAST",
    help="Stop after the first failing test (overrides run.fail_fast).",
)
@click.option(
    "-c",
    "--config-path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
    default=None,
    envvar="EZT_CONF",
    help="Path to the settings file (env var EZT_CONF).",
    show_envvar=True,
)
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    files: tuple[str, ...],
    saved: bool,
    failed_only: bool,
    fail_fast: bool | None,
    config_path: Path | None,
    **kwargs,
):
    """Run test files through mix test with live progress."""
    if saved and failed_only:
        raise click.UsageError("Use either -r or -f, not both.")
    if files and (saved or failed_only):
        raise click.UsageError("Explicit files cannot be combined with -r or -f.")

    settings = load_settings_or_defaults(config_path)
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
        default_log_level=settings.log_level,
    )
    options = RunOptions(fail_fast=settings.run.fail_fast if fail_fast is None else fail_fast)

    project_dir = os.getcwd()
    store = StateStore()

    if failed_only:
        request = RunRequest.for_failed(options)
    else:
        selected = _resolve_files(ctx, store, project_dir, files, saved)
        if not selected:
            click.echo("No tests selected.")
            ctx.exit(0)
        request = RunRequest.for_files(selected, options)

    log.info(
        "Executing 'run' command",
        project=project_dir,
        files=len(request.files),
        failed_only=request.failed_only,
        fail_fast=options.fail_fast,
    )

    console = Console(highlight=False)
    reporter = ResultsReporter(console)
    live_progress = settings.ui.animations and is_interactive_terminal()
    runner = MixTestRunner(console=console, live_progress=live_progress, reporter=reporter)
    orchestrator = RunOrchestrator(project_dir, runner, store=store, reporter=reporter)

    exit_code = _run_orchestrator(orchestrator, request)
    log.info("'run' command finished.", exit_code=exit_code)
    ctx.exit(exit_code)


@click.command(name="failures")
@logging_options
@click.pass_context
def failures_cli(ctx: click.Context, **kwargs):
    """List the failing test files remembered for this project."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    try:
        failures = StateStore().get_project_failures(os.getcwd())
    except StateError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if not failures:
        click.echo("No failing tests recorded.")
        return
    for path in failures:
        click.echo(path)

# 🖥️⚙️
