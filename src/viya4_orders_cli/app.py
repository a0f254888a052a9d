"""Typer application and CLI entry point for viya4_orders_cli.

This module wires together the top-level Typer application, its global
options, and the asset commands from :mod:`viya4_orders_cli.commands`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a signal handler and invokes the Typer app.
:class:`~viya4_orders_cli.exceptions.OrdersCliError` instances that escape a
command exit with their ``exit_code``; any other exception is written to a
crash log.

See Also:
    :mod:`viya4_orders_cli.config`: Settings resolution.
    :mod:`viya4_orders_cli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import tempfile
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from viya4_orders_cli import __version__
from viya4_orders_cli.commands import register_asset_commands
from viya4_orders_cli.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="viya4-orders-cli",
    help=f"SAS Viya Orders CLI version {__version__} -- a CLI to the SAS Viya Orders API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

register_asset_commands(app)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"viya4-orders-cli {__version__}")
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
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Config file (default is $HOME/.viya4-orders-cli)."
    ),
    file_name: Optional[str] = typer.Option(
        None,
        "--file-name",
        "-n",
        help="Name of the file where the downloaded order asset is stored; "
        "the extension returned by the API is kept.",
    ),
    file_path: Optional[str] = typer.Option(
        None,
        "--file-path",
        "-p",
        help="Directory where the downloaded order asset is stored "
        "(default is the current working directory).",
    ),
    output_format: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: j, json, t, text (default text)."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every command.

    Resolves the layered configuration, installs the global
    :class:`~viya4_orders_cli.output.OutputManager`, and stores the
    resolved :class:`~viya4_orders_cli.models.Settings` in ``ctx.obj``.

    Raises:
        typer.Exit: With the error's exit code if the configuration is
            invalid.
    """
    from viya4_orders_cli.config import resolve_settings
    from viya4_orders_cli.exceptions import OrdersCliError
    from viya4_orders_cli.output import (
        OutputFormat,
        OutputManager,
        configure_logging,
        resolve_format,
        set_output,
    )

    output = OutputManager(format=resolve_format(output_format), no_color=no_color)
    set_output(output)
    configure_logging(verbose, output.stderr_console)

    try:
        settings = resolve_settings(
            config_file=config_file,
            file_path=file_path,
            file_name=file_name,
            output=output_format,
        )
    except OrdersCliError as exc:
        output.error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    # The config file may have changed the output format.
    if resolve_format(settings.output) != output.format:
        output = OutputManager(format=resolve_format(settings.output), no_color=no_color)
        set_output(output)
        configure_logging(verbose, output.stderr_console)

    if output.format == OutputFormat.TEXT:
        if settings.config_file:
            output.info(f"INFO: using config file: {settings.config_file}")
        else:
            output.info("INFO: no config file found")

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to the temp directory and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    logs_dir = Path(tempfile.gettempdir()) / "viya4-orders-cli"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``viya4-orders-cli`` console script.

    Unhandled :class:`~viya4_orders_cli.exceptions.OrdersCliError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
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
        from viya4_orders_cli.exceptions import OrdersCliError
        from viya4_orders_cli.output import error

        if isinstance(exc, OrdersCliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
