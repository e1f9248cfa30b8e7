"""Typer application and CLI entry point for ahrefs-cli.

This module wires together the top-level Typer application: the root
callback that parses the global flags into
:class:`~ahrefs_cli.models.GlobalOptions`, and the ``config`` and
``site-explorer`` (alias ``se``) sub-command groups.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`ahrefs_cli.config`: API key storage and resolution.
    :mod:`ahrefs_cli.output`: Diagnostics initialised in :func:`main_callback`.
"""

from __future__ import annotations

import json
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from ahrefs_cli import __version__
from ahrefs_cli.commands import options
from ahrefs_cli.commands.config import config_app
from ahrefs_cli.commands.runner import cancel_pending_request
from ahrefs_cli.commands.site_explorer import GROUP_HELP as SITE_EXPLORER_HELP
from ahrefs_cli.commands.site_explorer import app as site_explorer_app
from ahrefs_cli.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE
from ahrefs_cli.introspection import describe_command
from ahrefs_cli.models import GlobalOptions, OutputFormat
from ahrefs_cli.output import OutputManager, set_output

app = typer.Typer(
    name="ahrefs",
    help="Command-line client for the Ahrefs API v3.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(
    config_app,
    name="config",
    help="Manage CLI configuration",
)
app.add_typer(
    site_explorer_app,
    name="site-explorer",
    help=SITE_EXPLORER_HELP,
    short_help="Site Explorer API endpoints",
)
app.add_typer(site_explorer_app, name="se", help=SITE_EXPLORER_HELP, hidden=True)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ahrefs-cli {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    api_key: Optional[str] = options.api_key_option(),
    output_format: OutputFormat = options.format_option(OutputFormat.JSON),
    output_file: Optional[str] = options.output_option(),
    verbose: bool = options.verbose_option(),
    quiet: bool = options.quiet_option(),
    dry_run: bool = options.dry_run_option(),
    no_color: bool = options.no_color_option(),
    list_commands: bool = typer.Option(
        False, "--list-commands", help="List all available commands as JSON."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~ahrefs_cli.output.OutputManager` from
    CLI flags and stores the parsed :class:`~ahrefs_cli.models.GlobalOptions`
    in ``ctx.obj`` so that sub-commands receive them explicitly.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        api_key: API key override (highest precedence).
        output_format: Output format for API responses.
        output_file: Redirect rendered output to a file path.
        verbose: Enable debug-level diagnostic output.
        quiet: Suppress non-essential diagnostic output.
        dry_run: Print the resolved URL instead of calling the API.
        no_color: Disable all colour and Rich markup.
        list_commands: Print the command tree as JSON and exit.
    """
    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.obj = GlobalOptions(
        api_key=api_key,
        format=output_format,
        output_file=output_file,
        verbose=verbose,
        quiet=quiet,
        dry_run=dry_run,
        no_color=no_color,
    )

    if list_commands:
        tree = describe_command(ctx.command, ctx.info_name or "ahrefs")
        typer.echo(json.dumps(tree, indent=2, ensure_ascii=False))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _handle_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
    """Cancel the API call in flight, or exit when there is none.

    A second Ctrl-C during the same call exits immediately.
    """
    if cancel_pending_request():
        return
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_CANCELLED)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""
    signal.signal(signal.SIGINT, _handle_sigint)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from ahrefs_cli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ahrefs`` console script.

    Unhandled :class:`~ahrefs_cli.exceptions.AhrefsError` instances
    cause a clean exit with the error's ``exit_code``.  All other exceptions
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
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from ahrefs_cli.exceptions import AhrefsError
        from ahrefs_cli.output import error, suggest

        if isinstance(exc, AhrefsError):
            error(exc.message)
            if exc.suggestion:
                suggest(exc.suggestion)
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
