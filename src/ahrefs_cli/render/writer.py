"""Envelope rendering in four output formats.

:class:`ResponseWriter` owns one output sink (stdout, a caller-supplied
stream or a file opened from ``--output``) and renders either a success
envelope::

    {"status": "success", "data": <payload>, "meta": {...}}

or an error envelope::

    {"status": "error", "error": {"message": ..., "code": ..., ...}}

in the selected :class:`~ahrefs_cli.models.OutputFormat`.  CSV and table
output drop the envelope and render only the payload's row set.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import sys
from typing import IO, Any, Optional

from ahrefs_cli.exceptions import AhrefsError, APIError, OutputError, RenderError, RequestFailedError
from ahrefs_cli.models import OutputFormat, ResponseMeta
from ahrefs_cli.render.shapes import (
    extract_rows,
    format_value,
    is_mapping,
    is_record,
    is_sequence,
    record_fields,
    row_items,
    to_jsonable,
)
from ahrefs_cli.render.table import align_columns

logger = logging.getLogger(__name__)

INDENT = "  "
NO_RESULTS = "(no results)"


def format_error(exc: BaseException) -> dict[str, Any]:
    """Build the ``error`` object of an error envelope.

    API errors contribute ``message`` and ``code`` plus ``suggestion`` and
    ``docs_url`` when set.  A :class:`RequestFailedError` whose last failure
    was an API error keeps its own message but reports the API error's
    code, suggestion and docs link.  Other errors carry ``message`` and,
    when present, ``suggestion``.
    """
    if isinstance(exc, APIError):
        api_error: Optional[APIError] = exc
        message = exc.message
    elif isinstance(exc, RequestFailedError) and isinstance(exc.last_error, APIError):
        api_error = exc.last_error
        message = exc.message
    else:
        api_error = None
        message = exc.message if isinstance(exc, AhrefsError) else str(exc)

    error: dict[str, Any] = {"message": message}
    if api_error is not None:
        error["code"] = api_error.code
        if api_error.suggestion:
            error["suggestion"] = api_error.suggestion
        if api_error.docs_url:
            error["docs_url"] = api_error.docs_url
    elif isinstance(exc, AhrefsError) and exc.suggestion:
        error["suggestion"] = exc.suggestion
    return error


def meta_dict(meta: ResponseMeta) -> dict[str, int]:
    """The ``meta`` object of a success envelope; zero counters are omitted."""
    result = {"response_time_ms": meta.response_time_ms}
    if meta.units_consumed > 0:
        result["units_consumed"] = meta.units_consumed
    if meta.rate_limit_remaining > 0:
        result["rate_limit_remaining"] = meta.rate_limit_remaining
    return result


class ResponseWriter:
    """Renders envelopes to a single output sink.

    Use as a context manager.  When *output_file* is given the file is
    created (truncating any existing file) on entry and closed exactly once
    on exit, whichever way the block is left.  A caller-supplied *stream*
    or ``sys.stdout`` is never closed.

    Args:
        format: The output format.
        output_file: Optional path to write to instead of stdout.
        stream: Optional text stream to write to.  Ignored when
            *output_file* is set.

    Raises:
        OutputError: If the output file cannot be opened or written.
        RenderError: If the payload cannot be rendered in *format*.

    Example::

        with ResponseWriter(OutputFormat.CSV, output_file="links.csv") as writer:
            writer.write_success(payload)
    """

    def __init__(
        self,
        format: OutputFormat | str = OutputFormat.JSON,
        output_file: Optional[str] = None,
        stream: Optional[IO[str]] = None,
    ) -> None:
        self.format = OutputFormat(format)
        self._output_file = output_file
        self._stream = stream
        self._sink: Optional[IO[str]] = None
        self._owns_sink = False

    # ------------------------------------------------------------------ #
    # Sink lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> ResponseWriter:
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def open(self) -> None:
        if self._sink is not None:
            return
        if self._output_file:
            try:
                self._sink = open(self._output_file, "w", encoding="utf-8", newline="")
            except OSError as exc:
                raise OutputError(f"failed to create output file: {exc}") from exc
            self._owns_sink = True
        else:
            self._sink = self._stream if self._stream is not None else sys.stdout
            self._owns_sink = False

    def close(self) -> None:
        sink, self._sink = self._sink, None
        if sink is None:
            return
        if self._owns_sink:
            try:
                sink.close()
            except OSError as exc:
                raise OutputError(f"failed to close output file: {exc}") from exc
        else:
            sink.flush()

    @property
    def closed(self) -> bool:
        return self._sink is None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def write_success(self, payload: Any, meta: Optional[ResponseMeta] = None) -> None:
        """Render a success envelope for *payload*."""
        if self.format == OutputFormat.JSON:
            envelope: dict[str, Any] = {"status": "success", "data": to_jsonable(payload)}
            if meta is not None:
                envelope["meta"] = meta_dict(meta)
            text = self._json(envelope)
        elif self.format == OutputFormat.YAML:
            text = "status: success\ndata:\n" + "".join(_yaml_lines(payload, 1))
        elif self.format == OutputFormat.CSV:
            text = self._csv(payload)
        else:
            text = self._table(payload)
        self._write(text)

    def write_error(self, exc: BaseException) -> None:
        """Render an error envelope for *exc*.

        YAML output gets the YAML-like dump of the envelope; every other
        format gets JSON so that errors stay machine-readable.
        """
        error = format_error(exc)
        if self.format == OutputFormat.YAML:
            text = "status: error\nerror:\n" + "".join(_yaml_lines(error, 1))
        else:
            text = self._json({"status": "error", "error": error})
        self._write(text)

    # ------------------------------------------------------------------ #
    # Format renderers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _json(envelope: dict[str, Any]) -> str:
        return json.dumps(envelope, indent=2, ensure_ascii=False) + "\n"

    def _csv(self, payload: Any) -> str:
        rows = extract_rows(payload)
        if rows is None:
            raise RenderError("CSV format requires array/slice data")
        if not rows:
            return ""

        headers = [name for name, _ in row_items(rows[0])]
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(headers)
        for row in rows:
            writer.writerow(_cells(row, headers))
        return buffer.getvalue()

    def _table(self, payload: Any) -> str:
        rows = extract_rows(payload)
        if rows is None:
            lines = _key_value_lines(payload)
        elif not rows:
            lines = [NO_RESULTS]
        else:
            headers = [name for name, _ in row_items(rows[0])]
            lines = ["\t".join(headers), "-" * (len(headers) * 10)]
            lines.extend("\t".join(_cells(row, headers)) for row in rows)
        return "".join(line + "\n" for line in align_columns(lines))

    def _write(self, text: str) -> None:
        if self._sink is None:
            self.open()
        assert self._sink is not None
        if not text:
            return
        try:
            self._sink.write(text)
            self._sink.flush()
        except OSError as exc:
            raise OutputError(f"failed to write output: {exc}") from exc
        logger.debug("Wrote %d characters of %s output", len(text), self.format.value)


# --- Helpers ---


def _cells(row: Any, headers: list[str]) -> list[str]:
    """Cells of *row* in *headers* order; missing columns are empty."""
    values = dict(row_items(row))
    return [format_value(values.get(header)) for header in headers]


def _key_value_lines(payload: Any) -> list[str]:
    if is_mapping(payload):
        return [f"{key}:\t{format_value(value)}" for key, value in payload.items()]
    if is_record(payload):
        return [f"{f.identifier}:\t{format_value(f.value)}" for f in record_fields(payload)]
    return [f"Value:\t{format_value(payload)}"]


def _yaml_scalar(value: Any) -> str:
    if value is None:
        return "null"
    return format_value(value)


def _yaml_lines(value: Any, depth: int) -> list[str]:
    """The YAML-like dump of *value* at indentation *depth*.

    Mapping keys and record fields become ``key:`` headers with the value
    one level deeper, sequence items become ``-`` with the item one level
    deeper, and scalars go on their own line.
    """
    prefix = INDENT * depth
    lines: list[str] = []
    if is_record(value):
        for field in record_fields(value):
            lines.append(f"{prefix}{field.identifier}:\n")
            lines.extend(_yaml_lines(field.value, depth + 1))
    elif is_mapping(value):
        for key, item in value.items():
            lines.append(f"{prefix}{key}:\n")
            lines.extend(_yaml_lines(item, depth + 1))
    elif is_sequence(value):
        for item in value:
            lines.append(f"{prefix}-\n")
            lines.extend(_yaml_lines(item, depth + 1))
    else:
        lines.append(f"{prefix}{_yaml_scalar(value)}\n")
    return lines
