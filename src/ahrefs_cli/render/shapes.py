"""Shape dispatch for structured payloads.

The renderer accepts any tree built from three shapes:

* **Mapping** -- ``dict`` and friends; keys in insertion order.
* **Sequence** -- ``list``/``tuple`` (never ``str`` or ``bytes``).
* **Record** -- a Pydantic model or a dataclass instance.  Fields are
  visited in declaration order.

Everything else is a scalar.

Records expose two names per field: the Python identifier (used by the
YAML-like dump and the table key/value listing) and the serialization name
(used by JSON output and CSV/table column headers).  For Pydantic models
the serialization name is the field's alias; for dataclasses it is
``metadata["json"]``.  A field is suppressed when declared with
``exclude=True`` (Pydantic) or ``metadata={"json": "-"}`` (dataclass);
dataclass fields starting with ``_`` are hidden.
"""

from __future__ import annotations

import dataclasses
import enum
import json
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, NamedTuple, Optional

from pydantic import BaseModel

SUPPRESSED = "-"


class RecordField(NamedTuple):
    """One visible field of a record."""

    identifier: str
    serialized_name: Optional[str]
    value: Any

    @property
    def suppressed(self) -> bool:
        return self.serialized_name is None


# --- Shape predicates ---


def is_record(value: Any) -> bool:
    """True for Pydantic model and dataclass *instances*."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


# --- Record traversal ---


def _pydantic_fields(model: BaseModel) -> Iterator[RecordField]:
    for name, info in type(model).model_fields.items():
        if info.exclude:
            serialized: Optional[str] = None
        else:
            serialized = info.serialization_alias or info.alias or name
        yield RecordField(name, serialized, getattr(model, name))
    for name, value in (model.model_extra or {}).items():
        yield RecordField(name, name, value)


def _dataclass_fields(instance: Any) -> Iterator[RecordField]:
    for field in dataclasses.fields(instance):
        if field.name.startswith("_"):
            continue
        tag = field.metadata.get("json", field.name)
        serialized = None if tag == SUPPRESSED else tag
        yield RecordField(field.name, serialized, getattr(instance, field.name))


def record_fields(record: Any) -> list[RecordField]:
    """Return the visible fields of *record* in declaration order.

    Suppressed fields are included with ``serialized_name=None``; callers
    that emit serialization names skip them, callers that emit identifiers
    keep them.
    """
    if isinstance(record, BaseModel):
        return list(_pydantic_fields(record))
    return list(_dataclass_fields(record))


def serialized_items(record: Any) -> list[tuple[str, Any]]:
    """``(serialization name, value)`` pairs of a record, suppressed fields skipped."""
    return [
        (f.serialized_name, f.value)
        for f in record_fields(record)
        if f.serialized_name is not None
    ]


# --- Conversion ---


def to_jsonable(value: Any) -> Any:
    """Convert a payload tree into plain JSON-compatible values.

    Records become dicts keyed by serialization name, with suppressed and
    ``None``-valued fields omitted.  Mapping entries are kept as-is
    (including ``None``).  Enums contribute their value.
    """
    if is_record(value):
        return {
            name: to_jsonable(item)
            for name, item in serialized_items(value)
            if item is not None
        }
    if is_mapping(value):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if is_sequence(value):
        return [to_jsonable(item) for item in value]
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def format_value(value: Any) -> str:
    """Format a single value for a CSV cell, table cell or key/value line.

    ``None`` is empty, booleans are ``true``/``false``, floats with an
    integral value drop the ``.0``, and containers or records are
    rendered as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, enum.Enum):
        return format_value(value.value)
    if is_record(value) or is_mapping(value) or is_sequence(value):
        return json.dumps(to_jsonable(value), separators=(",", ":"), ensure_ascii=False)
    return str(value)


# --- Row-set extraction ---


def extract_rows(payload: Any) -> Optional[Sequence[Any]]:
    """Find the row set of a payload.

    A sequence is used directly.  A mapping or record is searched, in key
    or declaration order, for its first sequence value.  Returns ``None``
    when the payload has no sequence at its top level.
    """
    if is_sequence(payload):
        return payload
    if is_mapping(payload):
        values: Iterator[Any] = iter(payload.values())
    elif is_record(payload):
        values = (f.value for f in record_fields(payload))
    else:
        return None
    for value in values:
        if is_sequence(value):
            return value
    return None


def row_items(row: Any) -> list[tuple[str, Any]]:
    """Column name / value pairs for one row.

    Records use serialization names, falling back to the identifier for
    suppressed fields; mappings use their keys.  Any other row becomes a
    single ``value`` column.
    """
    if is_record(row):
        return [(f.serialized_name or f.identifier, f.value) for f in record_fields(row)]
    if is_mapping(row):
        return [(str(k), v) for k, v in row.items()]
    return [("value", row)]
