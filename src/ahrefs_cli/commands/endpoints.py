"""Declarative endpoint commands.

Each API endpoint is described once as an :class:`Endpoint` -- its path,
help text, examples, query parameters and response model -- and turned into
a Typer command by :func:`register_endpoints`.  Because the generated
commands are ordinary Click commands, every endpoint and flag declared here
shows up in ``--help`` and ``--list-commands`` without further wiring.

The generated function is compiled from source so that :mod:`inspect`
(which Typer relies on) sees a real signature with one keyword parameter
per flag.
"""

from __future__ import annotations

import keyword
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

import typer
from pydantic import BaseModel

from ahrefs_cli.commands.options import GLOBAL_FLAGS, apply_global_flags
from ahrefs_cli.exceptions import InvalidUsageError
from ahrefs_cli.models import HTTPMethod, TargetMode

# Signature of the callable that executes an endpoint command.
Runner = Callable[[typer.Context, "Endpoint", dict[str, Any]], Any]


@dataclass(frozen=True)
class EndpointParam:
    """One query parameter of an endpoint, exposed as a ``--flag``.

    Attributes:
        flag: The CLI flag name without dashes (``order-by``).
        query: The query-string parameter name (``order_by``).
        type: The Python type of the value (``str``, ``int``, an enum, ...).
        default: The default value; ``None`` means "not sent".
        required: Whether the flag must be supplied.
        help: Help text for ``--help`` and ``--list-commands``.
        omit_default: Do not send the parameter while it holds its default
            (``--offset 0`` is never sent).
        minimum: Smallest accepted value for numeric flags.
    """

    flag: str
    query: str
    type: Any = str
    default: Any = None
    required: bool = False
    help: str = ""
    omit_default: bool = False
    minimum: Optional[int] = None

    @property
    def identifier(self) -> str:
        """The Python parameter name derived from the flag."""
        name = re.sub(r"[^0-9a-zA-Z_]", "_", self.flag)
        if keyword.iskeyword(name):
            name = f"{name}_"
        return name

    def query_value(self, value: Any) -> Any:
        """The value to send for this parameter, or ``None`` to leave it out.

        Raises:
            InvalidUsageError: If the value is below :attr:`minimum`.
        """
        if self.minimum is not None and value is not None and value < self.minimum:
            raise InvalidUsageError(
                f"--{self.flag} must be at least {self.minimum}, got {value}",
                suggestion=f"Pass a value >= {self.minimum} to --{self.flag}",
            )
        if self.omit_default and value == self.default:
            return None
        return value


@dataclass(frozen=True)
class Endpoint:
    """An API endpoint exposed as a CLI command."""

    name: str
    path: str
    summary: str
    description: str = ""
    examples: str = ""
    params: tuple[EndpointParam, ...] = ()
    response_model: Optional[type[BaseModel]] = None
    method: HTTPMethod = HTTPMethod.GET

    def query_params(self, values: dict[str, Any]) -> dict[str, Any]:
        """Map parsed flag values (keyed by identifier) to query parameters."""
        query: dict[str, Any] = {}
        for param in self.params:
            value = param.query_value(values.get(param.identifier))
            if value is not None:
                query[param.query] = value
        return query


# ---------------------------------------------------------------------------
# Common parameters
# ---------------------------------------------------------------------------

TARGET = EndpointParam("target", "target", required=True, help="Target domain or URL")
MODE = EndpointParam(
    "mode",
    "mode",
    type=TargetMode,
    default=TargetMode.DOMAIN,
    help="Mode: exact, domain, prefix, subdomains",
)
DATE = EndpointParam("date", "date", help="Date for historical data (YYYY-MM-DD)")
LIMIT = EndpointParam(
    "limit", "limit", type=int, default=100, minimum=1, help="Maximum number of results"
)
OFFSET = EndpointParam(
    "offset",
    "offset",
    type=int,
    default=0,
    omit_default=True,
    minimum=0,
    help="Offset for pagination",
)
SELECT = EndpointParam("select", "select", help="Comma-separated list of fields to return")
WHERE = EndpointParam("where", "where", help="Filter expression (Ahrefs filter syntax)")
COUNTRY = EndpointParam("country", "country", help="Country code (e.g., us, gb, de)")
DATE_FROM = EndpointParam("date-from", "date_from", help="Start date (YYYY-MM-DD)")
DATE_TO = EndpointParam("date-to", "date_to", help="End date (YYYY-MM-DD)")


def order_by(example: str) -> EndpointParam:
    """The ``--order-by`` parameter with an endpoint-specific example."""
    return EndpointParam("order-by", "order_by", help=f"Sort order (e.g., {example})")


# ---------------------------------------------------------------------------
# Command generation
# ---------------------------------------------------------------------------


def _option_type(param: EndpointParam) -> Any:
    if param.default is None and not param.required:
        return Optional[param.type]
    return param.type


def _option_default(param: EndpointParam) -> Any:
    if param.required:
        return typer.Option(..., f"--{param.flag}", help=param.help or None)
    return typer.Option(param.default, f"--{param.flag}", help=param.help or None)


def _slugify(value: str) -> str:
    return re.sub(r"[^0-9a-zA-Z]+", "_", value).strip("_").lower()


def build_endpoint_command(endpoint: Endpoint, runner: Runner) -> Callable[..., Any]:
    """Generate a Typer-compatible function for *endpoint*.

    The function takes the Typer context, one keyword parameter per
    :class:`EndpointParam` and one per global flag.  Global flags are merged
    into ``ctx.obj`` first; then ``runner(ctx, endpoint, values)`` is called
    with the endpoint values keyed by parameter identifier.

    Args:
        endpoint: The endpoint to generate a command for.
        runner: Called when the command is invoked.

    Returns:
        A callable suitable for registration via :meth:`typer.Typer.command`.
    """
    func_name = f"_cmd_{_slugify(endpoint.path)}"
    namespace: dict[str, Any] = {"_Context": typer.Context}

    sig_parts = ["ctx: _Context"]
    for idx, param in enumerate(endpoint.params):
        sentinel = f"_default_{idx}"
        ann = f"_ann_{idx}"
        namespace[sentinel] = _option_default(param)
        namespace[ann] = _option_type(param)
        sig_parts.append(f"{param.identifier}: {ann} = {sentinel}")
    for name, annotation, factory in GLOBAL_FLAGS:
        namespace[f"_global_default_{name}"] = factory()
        namespace[f"_global_ann_{name}"] = annotation
        sig_parts.append(f"{name}: _global_ann_{name} = _global_default_{name}")

    values = ", ".join(f"{p.identifier!r}: {p.identifier}" for p in endpoint.params)
    flags = ", ".join(f"{name!r}: {name}" for name, _, _ in GLOBAL_FLAGS)
    source = (
        f"def {func_name}({', '.join(sig_parts)}):\n"
        f"    return _dispatch(ctx, {{{values}}}, {{{flags}}})\n"
    )

    def _dispatch(ctx: typer.Context, collected: dict[str, Any], global_flags: dict[str, Any]) -> Any:
        apply_global_flags(ctx, **global_flags)
        return runner(ctx, endpoint, collected)

    namespace["_dispatch"] = _dispatch

    code = compile(source, f"<ahrefs:{endpoint.path}>", "exec")
    exec(code, namespace)  # noqa: S102 -- controlled code generation
    fn = namespace[func_name]
    fn.__doc__ = endpoint.description or endpoint.summary
    return fn


def register_endpoints(app: typer.Typer, endpoints: list[Endpoint], runner: Runner) -> None:
    """Attach one command per endpoint to *app*."""
    for endpoint in endpoints:
        fn = build_endpoint_command(endpoint, runner)
        app.command(
            name=endpoint.name,
            help=endpoint.description or endpoint.summary,
            short_help=endpoint.summary,
            epilog=endpoint.examples or None,
        )(fn)
