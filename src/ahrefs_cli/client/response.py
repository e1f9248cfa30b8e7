"""Response decoding -- maps a raw :class:`~ahrefs_cli.models.Response` to a payload.

After a successful call, :func:`decode_payload` turns the body into the
endpoint's response model, which the renderer then walks field by field.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ahrefs_cli.exceptions import DecodeError
from ahrefs_cli.models import Response


def decode_payload(response: Response, model: Optional[type[BaseModel]] = None) -> Any:
    """Decode the body of a successful response.

    Args:
        response: The response returned by the client.
        model: The endpoint's response model.  When ``None`` the body is
            returned as plain JSON (``dict``, ``list``, ...).

    Returns:
        A *model* instance, or the decoded JSON.  An empty body decodes to
        an empty model (or ``None`` without a model).

    Raises:
        DecodeError: If the body is not valid JSON or does not match *model*.
    """
    body = response.body
    if model is None:
        if not body.strip():
            return None
        try:
            return json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"failed to parse response: {exc}") from exc

    if not body.strip():
        return model()
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise DecodeError(f"failed to parse response: {exc}") from exc
