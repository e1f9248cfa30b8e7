"""Global flags shared by the root command and every leaf command.

The root callback parses them into :class:`~ahrefs_cli.models.GlobalOptions`.
Leaf commands declare the same flags again so they can be given anywhere on
the command line (``ahrefs se backlinks --target x --format csv``).  A value
given on the leaf overrides the root one; switches can only be turned on.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import typer

from ahrefs_cli.models import GlobalOptions, OutputFormat
from ahrefs_cli.output import OutputManager, set_output


def api_key_option() -> Any:
    return typer.Option(
        None, "--api-key", help="Ahrefs API key (overrides AHREFS_API_KEY and the config file)."
    )


def format_option(default: Optional[OutputFormat] = None) -> Any:
    return typer.Option(default, "--format", help="Output format: json, yaml, csv, table.")


def output_option() -> Any:
    return typer.Option(None, "--output", "-o", help="Write output to a file instead of stdout.")


def verbose_option() -> Any:
    return typer.Option(False, "--verbose", "-v", help="Enable debug output.")


def quiet_option() -> Any:
    return typer.Option(False, "--quiet", "-q", help="Suppress non-essential output.")


def dry_run_option() -> Any:
    return typer.Option(
        False, "--dry-run", help="Print the request that would be sent without sending it."
    )


def no_color_option() -> Any:
    return typer.Option(False, "--no-color", help="Disable color output.")


# (identifier, annotation, option factory), in --help order.
GLOBAL_FLAGS: tuple[tuple[str, Any, Callable[[], Any]], ...] = (
    ("api_key", Optional[str], api_key_option),
    ("output_format", Optional[OutputFormat], format_option),
    ("output_file", Optional[str], output_option),
    ("verbose", bool, verbose_option),
    ("quiet", bool, quiet_option),
    ("dry_run", bool, dry_run_option),
    ("no_color", bool, no_color_option),
)

_DISPLAY_SWITCHES = {"verbose", "quiet", "no_color"}


def apply_global_flags(
    ctx: typer.Context,
    api_key: Optional[str] = None,
    output_format: Optional[OutputFormat] = None,
    output_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    dry_run: bool = False,
    no_color: bool = False,
) -> GlobalOptions:
    """Merge global flags given on a leaf command into ``ctx.obj``.

    The diagnostics manager is rebuilt when a display switch is turned on
    here, so ``-q`` or ``-v`` behave the same before and after the command
    name.

    Returns:
        The :class:`GlobalOptions` in effect for the command.
    """
    base = ctx.obj if isinstance(ctx.obj, GlobalOptions) else GlobalOptions()

    update: dict[str, Any] = {}
    if api_key is not None:
        update["api_key"] = api_key
    if output_format is not None:
        update["format"] = output_format
    if output_file is not None:
        update["output_file"] = output_file
    for name, value in (
        ("verbose", verbose),
        ("quiet", quiet),
        ("dry_run", dry_run),
        ("no_color", no_color),
    ):
        if value:
            update[name] = True

    options = base.model_copy(update=update) if update else base
    if _DISPLAY_SWITCHES & update.keys():
        set_output(OutputManager(no_color=options.no_color, quiet=options.quiet, verbose=options.verbose))
    ctx.obj = options
    return options
