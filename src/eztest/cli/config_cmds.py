# src/eztest/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from eztest.cli.utils import logging_options, setup_logging_from_context
from eztest.config import get_app_config_path, get_state_path, load_app_settings
from eztest.exceptions import ConfigurationError
from eztest.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting settings."""
    pass


@config_cli.command(name="show")
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
def show_config(ctx: click.Context, config_path: Path | None, **kwargs):
    """Load, validate, and display the settings."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    log.info("Executing 'config show' command", config_path=str(config_path or get_app_config_path()))

    try:
        settings = load_app_settings(config_path)
    except ConfigurationError as e:
        log.error("Failed to load or validate settings", error=str(e))
        click.echo(f"Error: Settings problem:\n{e}", err=True)
        ctx.exit(1)

    click.echo(pretty_repr(settings, expand_all=True))
    click.echo(f"Settings file: {config_path or get_app_config_path()}")
    click.echo(f"State file: {get_state_path()}")

# 🔼⚙️
