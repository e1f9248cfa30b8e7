"""Execution of endpoint commands.

:func:`run_endpoint` is the single code path behind every generated
endpoint command: it builds the request from the parsed flags, honours
``--dry-run`` and ``--verbose``, calls the API and renders the result (or
the error) through a :class:`~ahrefs_cli.render.ResponseWriter`.

A call in flight can be cancelled from the SIGINT handler with
:func:`cancel_pending_request`; the client then stops at its next retry
backoff instead of sleeping through it.
"""

from __future__ import annotations

import threading
from typing import Any, NoReturn, Optional

import typer

from ahrefs_cli.client import AhrefsClient, build_url, decode_payload
from ahrefs_cli.commands.endpoints import Endpoint
from ahrefs_cli.config import resolve_api_key, resolve_base_url
from ahrefs_cli.exceptions import AhrefsError
from ahrefs_cli.models import ClientSettings, GlobalOptions, Request
from ahrefs_cli.output import get_output
from ahrefs_cli.render import ResponseWriter

_cancel = threading.Event()
_in_flight = threading.Event()


def get_options(ctx: typer.Context) -> GlobalOptions:
    """Return the :class:`GlobalOptions` stored by the root callback."""
    if isinstance(ctx.obj, GlobalOptions):
        return ctx.obj
    return GlobalOptions()


def create_client(settings: ClientSettings) -> AhrefsClient:
    """Build the API client.  Replaced in tests to inject a mock transport."""
    return AhrefsClient(settings)


def client_settings(options: GlobalOptions) -> ClientSettings:
    """Resolve the client settings for this invocation.

    Raises:
        ConfigError: If the stored config has to be read and is invalid.
    """
    return ClientSettings(api_key=resolve_api_key(options.api_key), base_url=resolve_base_url())


def cancel_pending_request() -> bool:
    """Ask the API call in flight to stop at its next backoff wait.

    Returns:
        ``False`` when no call is in flight or cancellation was already
        requested, so the caller should exit instead.
    """
    if not _in_flight.is_set() or _cancel.is_set():
        return False
    _cancel.set()
    return True


def fail(options: GlobalOptions, exc: AhrefsError) -> NoReturn:
    """Render *exc* as an error envelope and exit with its code."""
    try:
        with ResponseWriter(options.format, options.output_file) as writer:
            writer.write_error(exc)
    except AhrefsError as sink_exc:
        get_output().error(sink_exc.message)
        raise typer.Exit(sink_exc.exit_code) from sink_exc
    raise typer.Exit(exc.exit_code) from exc


def call_api(
    options: GlobalOptions,
    request: Request,
    model: Any = None,
) -> Any:
    """Execute *request*, render the decoded payload and return it.

    Every :class:`AhrefsError` -- missing key, API error, decode or render
    failure -- is rendered as an error envelope and turned into
    :class:`typer.Exit` with the error's exit code.
    """
    output = get_output()
    try:
        with ResponseWriter(options.format, options.output_file) as writer:
            try:
                settings = client_settings(options)
                output.debug(f"Requesting: {request.method.value} {build_url(settings.base_url, request)}")
                _cancel.clear()
                _in_flight.set()
                try:
                    with create_client(settings) as client:
                        response = client.execute(request, cancel=_cancel)
                finally:
                    _in_flight.clear()
                if response.attempts > 1:
                    output.debug(f"Succeeded after {response.attempts} attempts")
                payload = decode_payload(response, model)
                writer.write_success(payload, response.meta)
                return payload
            except AhrefsError as exc:
                writer.write_error(exc)
                raise typer.Exit(exc.exit_code) from exc
    except AhrefsError as exc:
        # The writer itself failed (cannot open or write the sink).
        output.error(exc.message)
        raise typer.Exit(exc.exit_code) from exc


def send(options: GlobalOptions, request: Request, model: Any = None) -> Optional[Any]:
    """Send *request*, or with ``--dry-run`` only print the URL it would call.

    Returns:
        The decoded payload, or ``None`` for a dry run.
    """
    if options.dry_run:
        url = build_url(resolve_base_url(), request)
        get_output().print_data(f"Would call: {request.method.value} {url}")
        return None
    return call_api(options, request, model)


def run_endpoint(ctx: typer.Context, endpoint: Endpoint, values: dict[str, Any]) -> None:
    """Run an endpoint command with the parsed flag *values*."""
    options = get_options(ctx)
    try:
        query = endpoint.query_params(values)
    except AhrefsError as exc:
        fail(options, exc)
    request = Request.build(endpoint.method, endpoint.path, query)
    send(options, request, endpoint.response_model)
