"""HTTP rendering of Apiary failures.

Every failure reaches the client as ``{"Error": "<message>"}``.  The status
code comes from the failure's ``FailureKind`` through ``STATUS_BY_KIND``; the
message text is never inspected.  Note that CONFLICT maps to 403, not 409:
assignment conflicts are reported as a refused action.

Handlers registered by the application factory:
- ApiError               -> mapped status
- RequestValidationError -> 400 (malformed path/query parameters)
- HTTPException          -> its own status, same body shape
- anything else          -> 500 "Unknown server error" (logged with traceback)
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apiary.results import Failure, FailureKind, Result, T

logger = logging.getLogger(__name__)

STATUS_BY_KIND = MappingProxyType(
    {
        FailureKind.VALIDATION: 400,
        FailureKind.UNSUPPORTED_MEDIA_TYPE: 415,
        FailureKind.AUTH: 401,
        FailureKind.FORBIDDEN: 403,
        FailureKind.NOT_FOUND: 404,
        FailureKind.CONFLICT: 403,
        FailureKind.NOT_ACCEPTABLE: 406,
        FailureKind.METHOD_NOT_ALLOWED: 405,
    }
)


class ApiError(Exception):
    """Raised by route code to end a request with a failure response."""

    def __init__(self, failure: Failure, headers: dict[str, str] | None = None) -> None:
        super().__init__(failure.message)
        self.failure = failure
        self.headers = headers

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.failure.kind]


def unwrap(result: Result[T]) -> T:
    """Return the value of a successful result, or raise ApiError for a Failure."""
    if isinstance(result, Failure):
        raise ApiError(result)
    return result


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"Error": message}, headers=headers)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.failure.message, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request parameters on %s: %s", request.url.path, exc.errors())
    return error_response(400, "The request has invalid parameters")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Unknown server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
