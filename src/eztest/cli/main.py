# src/eztest/cli/main.py

"""
The `ezt` command group.

Subcommands run selected test files (`run`), list the files that failed
last time (`failures`) and print the effective settings (`config show`).
Logging flags given here apply to every subcommand unless it overrides them.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from eztest.cli.config_cmds import config_cli
from eztest.cli.run_cmds import failures_cli, run_cli
from eztest.cli.utils import logging_options, setup_logging_from_context
from eztest.telemetry import StructLogger

try:
    __version__ = version("eztest")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")

EXAMPLES = """
\b
Examples:
  ezt run test/my_app/user_test.exs   run one file and save it as the selection
  ezt run -r                          rerun the saved selection
  ezt run -f --fail-fast              rerun what mix remembers as failed
  ezt failures                        list failing files from the last run
"""


@click.group(context_settings={"help_option_names": ["-h", "--help"]}, epilog=EXAMPLES)
@click.version_option(__version__, "-V", "--version", prog_name="ezt", message="%(prog)s version %(version)s")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    Run Elixir test files through `mix test` with live progress and parsed failures.

    The chosen files and the files that failed are remembered per project
    directory, so the next run can reuse either set.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(
        LOG_LEVEL=log_level,
        LOG_FILE=log_file,
        JSON_LOGS=bool(json_logs),
    )
    setup_logging_from_context(ctx)
    log.debug("ezt started", subcommand=ctx.invoked_subcommand, log_level=log_level or "default")


for command in (run_cli, failures_cli, config_cli):
    cli.add_command(command)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
