"""Response validation -- turns an :class:`httpx.Response` into a body dict.

Every check here describes a single attempt: the caller in
:mod:`itemfetch.client.async_client` treats the raised
:class:`~itemfetch.exceptions.TransportFailure` or
:class:`~itemfetch.exceptions.MalformedResponseError` as a reason to retry.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from itemfetch.exceptions import MalformedResponseError, TransportFailure


def check_status(response: httpx.Response) -> None:
    """Raise :class:`TransportFailure` for any non-2xx status."""
    status = response.status_code
    if 200 <= status < 300:
        return
    detail = response.text[:200] if response.content else ""
    prefix = f"HTTP {status}"
    raise TransportFailure(f"{prefix}: {detail}" if detail else prefix, status_code=status)


def extract_response_data(
    response: httpx.Response,
    response_model: Optional[type[BaseModel]] = None,
) -> dict[str, Any]:
    """Decode the body as a JSON object and optionally validate its shape.

    Args:
        response: A response that already passed :func:`check_status`.
        response_model: Pydantic model the body must satisfy. The body is
            validated but returned as the original dict.

    Returns:
        The decoded JSON object.

    Raises:
        MalformedResponseError: If the body is empty, not JSON, not a JSON
            object, or fails *response_model* validation.
    """
    if not response.content:
        raise MalformedResponseError("Empty response body")

    try:
        body = response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Response body is not JSON: {exc}") from exc

    if not isinstance(body, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(body).__name__}"
        )

    if response_model is not None:
        try:
            response_model.model_validate(body)
        except ValidationError as exc:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in exc.errors()
            )
            raise MalformedResponseError(f"Unexpected response shape: {errors}") from exc

    return body
