"""Typer application and CLI entry point for oasmodel.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``validate``, ``convert``, ``inspect``,
``example``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~oasmodel.exceptions.OasModelError` instances exit with their own
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`oasmodel.config`: Settings resolution used in :func:`main_callback`.
    :mod:`oasmodel.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from oasmodel import __version__
from oasmodel.commands.config import config_app
from oasmodel.commands.convert import convert_command
from oasmodel.commands.example import example_command
from oasmodel.commands.inspect import inspect_app
from oasmodel.commands.validate import validate_command
from oasmodel.exit_codes import EXIT_GENERIC_FAILURE

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="oasmodel",
    help="Load, check and convert OpenAPI 3.x documents.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"oasmodel {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write primary output to this file."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective :class:`~oasmodel.config.Settings`, initialises
    the global :class:`~oasmodel.output.OutputManager` and logging, and
    stores the settings in the Typer context (``ctx.obj["settings"]``).

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Log debug records to stderr.
        output_file: Redirect primary data output to a file path.
    """
    from oasmodel.config import resolve_settings
    from oasmodel.exceptions import ConfigError
    from oasmodel.output import (
        OutputFormat,
        OutputManager,
        configure_logging,
        error,
        set_output,
    )

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    try:
        settings = resolve_settings(cli_format=cli_format)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = OutputManager(
        format=OutputFormat(settings.output.format),
        no_color=no_color,
        quiet=quiet,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(verbose, console=output.stderr_console)
    logger.debug("Effective settings: %s", settings.model_dump(mode="json"))

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


app.command("validate")(validate_command)
app.command("convert")(convert_command)
app.command("example")(example_command)
app.add_typer(inspect_app, name="inspect", help="Inspect document contents.")
app.add_typer(config_app, name="config", help="Settings management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from oasmodel.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``oasmodel`` console script.

    Unhandled :class:`~oasmodel.exceptions.OasModelError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from oasmodel.exceptions import OasModelError
        from oasmodel.output import error

        if isinstance(exc, OasModelError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
