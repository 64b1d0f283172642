"""Content negotiation and request-body parsing shared by all routes.

- ``json_body``           415 unless ``Content-Type: application/json``; 400 for
                          a body that is not a JSON object.
- ``require_json_accept`` 406 when the ``Accept`` header rules out JSON.
- ``parse_body``          400 when required attributes are missing or mistyped.
- ``method_not_allowed``  405 with an ``Accept`` header naming the valid methods.
"""

from __future__ import annotations

import json
from typing import Any, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from apiary.api.errors import ApiError, error_response
from apiary.results import Failure, FailureKind, validation_error

M = TypeVar("M", bound=BaseModel)

JSON_MEDIA_TYPE = "application/json"
_JSON_ACCEPTABLE = {"*/*", "application/*", JSON_MEDIA_TYPE}


def _media_type(header_value: str) -> str:
    return header_value.split(";", 1)[0].strip().lower()


def accepts_json(accept_header: str | None) -> bool:
    """True if an ``Accept`` header value admits an application/json response.

    A missing or empty header accepts anything.  Media ranges with ``q=0``
    are treated as refused.
    """
    if not accept_header or not accept_header.strip():
        return True
    for media_range in accept_header.split(","):
        media_type, *params = [part.strip() for part in media_range.split(";")]
        if media_type.lower() not in _JSON_ACCEPTABLE:
            continue
        if not any(_is_zero_quality(param) for param in params):
            return True
    return False


def _is_zero_quality(param: str) -> bool:
    name, _, value = param.partition("=")
    if name.strip().lower() != "q":
        return False
    try:
        return float(value) == 0
    except ValueError:
        return False


async def require_json_accept(request: Request) -> None:
    """FastAPI dependency: refuse requests that cannot accept a JSON response."""
    if not accepts_json(request.headers.get("accept")):
        raise ApiError(
            Failure(
                FailureKind.NOT_ACCEPTABLE,
                "Unsupported MIME type requested - only application/json supported",
            )
        )


async def json_body(request: Request) -> dict[str, Any]:
    """FastAPI dependency: return the request body as a JSON object."""
    if _media_type(request.headers.get("content-type", "")) != JSON_MEDIA_TYPE:
        raise ApiError(
            Failure(
                FailureKind.UNSUPPORTED_MEDIA_TYPE,
                "Unsupported MIME type received - server can only accept application/json",
            )
        )
    try:
        payload = json.loads(await request.body() or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ApiError(validation_error("The request body is not valid JSON")) from exc
    if not isinstance(payload, dict):
        raise ApiError(validation_error("The request body must be a JSON object"))
    return payload


def parse_body(model: type[M], payload: dict[str, Any]) -> M:
    """Validate *payload* against *model*, raising a 400 ApiError on failure."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        if any(error["type"] == "missing" for error in exc.errors()):
            message = "The request object is missing at least one of the required attributes"
        else:
            fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
            message = f"The request object has invalid values for: {', '.join(fields)}"
        raise ApiError(validation_error(message)) from exc


def method_not_allowed(path: str, allowed: list[str]) -> JSONResponse:
    """405 response advertising the methods *path* does support."""
    methods = ", ".join(allowed)
    return error_response(
        405,
        f"Acceptable requests to {path}: {methods}",
        headers={"Accept": methods},
    )
