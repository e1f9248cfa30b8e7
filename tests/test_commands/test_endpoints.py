"""Tests for declarative endpoint command generation."""

from __future__ import annotations

import inspect

import pytest
import typer
from typer.testing import CliRunner

from ahrefs_cli.commands.endpoints import (
    LIMIT,
    MODE,
    OFFSET,
    TARGET,
    Endpoint,
    EndpointParam,
    build_endpoint_command,
    order_by,
    register_endpoints,
)
from ahrefs_cli.exceptions import InvalidUsageError
from ahrefs_cli.exit_codes import EXIT_INVALID_USAGE
from ahrefs_cli.models import GlobalOptions, OutputFormat, TargetMode


ENDPOINT = Endpoint(
    name="things",
    path="/things/list",
    summary="List things",
    description="List all the things.",
    examples="tool things --target x",
    params=(TARGET, MODE, LIMIT, OFFSET, order_by("name:asc"), EndpointParam("class", "class")),
)


class TestEndpointParam:
    def test_identifier(self) -> None:
        assert EndpointParam("date-from", "date_from").identifier == "date_from"
        assert EndpointParam("class", "class").identifier == "class_"

    def test_minimum(self) -> None:
        assert LIMIT.query_value(1) == 1
        with pytest.raises(InvalidUsageError, match="--limit must be at least 1"):
            LIMIT.query_value(0)
        with pytest.raises(InvalidUsageError) as exc_info:
            OFFSET.query_value(-1)
        assert exc_info.value.exit_code == EXIT_INVALID_USAGE

    def test_omit_default(self) -> None:
        assert OFFSET.query_value(0) is None
        assert OFFSET.query_value(20) == 20
        assert LIMIT.query_value(100) == 100


class TestQueryParams:
    def test_maps_identifiers_to_query_names(self) -> None:
        values = {"target": "a.com", "mode": TargetMode.EXACT, "limit": 10, "offset": 0, "order_by": "x", "class_": None}
        assert ENDPOINT.query_params(values) == {"target": "a.com", "mode": TargetMode.EXACT, "limit": 10, "order_by": "x"}


class TestBuildCommand:
    def test_signature(self) -> None:
        fn = build_endpoint_command(ENDPOINT, lambda ctx, endpoint, values: None)
        params = list(inspect.signature(fn).parameters)
        assert params == [
            "ctx", "target", "mode", "limit", "offset", "order_by", "class_",
            "api_key", "output_format", "output_file", "verbose", "quiet", "dry_run", "no_color",
        ]
        assert fn.__doc__ == "List all the things."

    def test_runner_receives_values(self) -> None:
        calls = []
        app = typer.Typer()
        register_endpoints(app, [ENDPOINT], lambda ctx, endpoint, values: calls.append((endpoint, values)))

        @app.callback()
        def _root() -> None:
            pass

        result = CliRunner().invoke(app, ["things", "--target", "a.com", "--class", "premium", "--limit", "7"])
        assert result.exit_code == 0, result.output
        endpoint, values = calls[0]
        assert endpoint is ENDPOINT
        assert values == {
            "target": "a.com",
            "mode": TargetMode.DOMAIN,
            "limit": 7,
            "offset": 0,
            "order_by": None,
            "class_": "premium",
        }

    def test_global_flags_merged_into_context(self) -> None:
        seen = []
        app = typer.Typer()
        register_endpoints(app, [ENDPOINT], lambda ctx, endpoint, values: seen.append(ctx.obj))

        @app.callback()
        def _root(ctx: typer.Context) -> None:
            ctx.obj = GlobalOptions(format=OutputFormat.TABLE, api_key="root-key")

        result = CliRunner().invoke(
            app, ["things", "--target", "a.com", "--format", "csv", "--dry-run", "-o", "out.csv"]
        )
        assert result.exit_code == 0, result.output
        assert seen == [
            GlobalOptions(format=OutputFormat.CSV, api_key="root-key", dry_run=True, output_file="out.csv")
        ]
