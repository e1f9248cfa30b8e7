"""Config commands -- store, inspect and verify the API key.

Provides the ``ahrefs config`` sub-command group.  The key is persisted in
the ahrefs config directory (see :func:`~ahrefs_cli.config.config_path`)
with owner-only permissions; ``AHREFS_API_KEY`` and ``--api-key`` take
precedence over it at request time.
"""

from __future__ import annotations

import os
from typing import NoReturn, Optional

import typer

from ahrefs_cli.commands.options import (
    api_key_option,
    apply_global_flags,
    dry_run_option,
    format_option,
    no_color_option,
    output_option,
    quiet_option,
    verbose_option,
)
from ahrefs_cli.commands.runner import send
from ahrefs_cli.config import (
    API_KEY_ENV,
    clear_api_key,
    config_path,
    load_api_key,
    mask_api_key,
    save_api_key,
)
from ahrefs_cli.exceptions import AhrefsError
from ahrefs_cli.models import HTTPMethod, OutputFormat, Request
from ahrefs_cli.output import error, info, print_data, success, suggest, warning
from ahrefs_cli.responses import LimitsAndUsageResponse

LIMITS_AND_USAGE_ENDPOINT = "/subscription-info/limits-and-usage"

config_app = typer.Typer(
    help="Manage configuration settings for the Ahrefs CLI, including API key storage.",
    no_args_is_help=True,
)


def _fail(exc: AhrefsError) -> NoReturn:
    error(exc.message)
    if exc.suggestion:
        suggest(exc.suggestion)
    raise typer.Exit(exc.exit_code) from exc


@config_app.command(
    "set-key",
    short_help="Set the Ahrefs API key",
    epilog="ahrefs config set-key sk_your_api_key_here",
)
def config_set_key(
    ctx: typer.Context,
    api_key: str = typer.Argument(help="The API key to store."),
    quiet: bool = quiet_option(),
    no_color: bool = no_color_option(),
) -> None:
    """Save the Ahrefs API key to the configuration file.

    The file is written atomically and readable only by the current user.
    """
    apply_global_flags(ctx, quiet=quiet, no_color=no_color)
    try:
        path = save_api_key(api_key)
    except AhrefsError as exc:
        _fail(exc)
    success("API key saved successfully")
    info(f"Config file: {path}")
    if os.environ.get(API_KEY_ENV):
        warning(f"{API_KEY_ENV} is set and takes precedence over the stored key")


@config_app.command("show", short_help="Show current configuration")
def config_show(
    ctx: typer.Context,
    api_key: Optional[str] = api_key_option(),
    quiet: bool = quiet_option(),
    no_color: bool = no_color_option(),
) -> None:
    """Display the API key in effect (masked) and where it comes from."""
    options = apply_global_flags(ctx, api_key=api_key, quiet=quiet, no_color=no_color)

    if options.api_key:
        key, source = options.api_key, "--api-key flag"
    elif os.environ.get(API_KEY_ENV):
        key, source = os.environ[API_KEY_ENV], f"environment ({API_KEY_ENV})"
    else:
        try:
            key = load_api_key()
        except AhrefsError as exc:
            _fail(exc)
        source = f"config file ({config_path()})"

    if not key:
        print_data("No API key configured")
        suggest("Set one with: ahrefs config set-key <your-key>")
        return

    print_data(f"API Key: {mask_api_key(key)}")
    print_data(f"Source: {source}")


@config_app.command("clear-key", short_help="Remove the stored API key")
def config_clear_key(
    ctx: typer.Context,
    quiet: bool = quiet_option(),
    no_color: bool = no_color_option(),
) -> None:
    """Remove the API key from the configuration file.

    Keys supplied through ``AHREFS_API_KEY`` or ``--api-key`` are not
    affected.
    """
    apply_global_flags(ctx, quiet=quiet, no_color=no_color)
    try:
        removed = clear_api_key()
    except AhrefsError as exc:
        _fail(exc)
    if removed:
        success("API key removed")
    else:
        info("No API key stored")


@config_app.command("validate", short_help="Validate API key")
def config_validate(
    ctx: typer.Context,
    api_key: Optional[str] = api_key_option(),
    output_format: Optional[OutputFormat] = format_option(),
    output_file: Optional[str] = output_option(),
    verbose: bool = verbose_option(),
    quiet: bool = quiet_option(),
    dry_run: bool = dry_run_option(),
    no_color: bool = no_color_option(),
) -> None:
    """Test the API key in effect with a request to the limits-and-usage
    endpoint, which does not consume API units.

    On success the subscription limits are rendered in the selected output
    format; a rejected key exits with the authentication exit code.
    """
    options = apply_global_flags(
        ctx,
        api_key=api_key,
        output_format=output_format,
        output_file=output_file,
        verbose=verbose,
        quiet=quiet,
        dry_run=dry_run,
        no_color=no_color,
    )
    request = Request.build(HTTPMethod.GET, LIMITS_AND_USAGE_ENDPOINT)
    payload = send(options, request, LimitsAndUsageResponse)
    if payload is not None:
        success("API key is valid")
