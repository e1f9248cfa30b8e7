"""Output rendering for ahrefs-cli.

Payloads of any shape (mappings, sequences, Pydantic models, dataclasses)
are rendered as JSON, a YAML-like tree, CSV or an aligned table.

Example::

    from ahrefs_cli.render import ResponseWriter

    with ResponseWriter("table") as writer:
        writer.write_success(payload, response.meta)
"""

from ahrefs_cli.render.writer import ResponseWriter, format_error

__all__ = ["ResponseWriter", "format_error"]
