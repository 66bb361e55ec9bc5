"""Error taxonomy shared by the core and the HTTP layer.

Every guard, constructor and store lookup reports failure by raising one of
the four kinds below. None of them are retried inside the core:

- ``NotFoundError``: the referenced ping, group, user, response or attendee
  does not exist.
- ``ForbiddenError``: the caller is not the actor the operation requires
  (non-initiator cancelling, non-member posting, editing someone else's
  response).
- ``ConflictError``: the entity exists but its lifecycle state does not permit
  the operation, or the user already responded.
- ``RequestError``: malformed input independent of entity state.

Usage:
    from sensomatic.core.errors import ConflictError

    raise ConflictError(detail="Cannot confirm when ping is in gathering state")

Register the handlers in main.py:
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
    detail: str | None = None
    error_code: str | None = None
    context: dict[str, Any] | None = None


class APIError(Exception):
    """Base class for domain errors surfaced to callers."""

    status_code: int = 500
    error: str = "internal_error"
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: str | None = None,
        error_code: str | None = None,
        **context: Any,
    ) -> None:
        self.detail = detail or self.__class__.detail
        self.error_code = error_code
        self.context = context if context else None
        super().__init__(self.detail)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            error=self.error,
            detail=self.detail,
            error_code=self.error_code,
            context=self.context,
        )


class NotFoundError(APIError):
    """Referenced entity does not exist (404)."""

    status_code = 404
    error = "not_found"
    detail = "Resource not found"

    @classmethod
    def for_resource(cls, resource: str, **context: Any) -> "NotFoundError":
        return cls(detail=f"{resource} not found", **context)


class ForbiddenError(APIError):
    """Caller is not allowed to perform the operation (403)."""

    status_code = 403
    error = "forbidden"
    detail = "Access denied"


class ConflictError(APIError):
    """Entity state does not permit the operation (409)."""

    status_code = 409
    error = "conflict"
    detail = "Operation conflicts with current state"


class RequestError(APIError):
    """Malformed request input (400)."""

    status_code = 400
    error = "validation_error"
    detail = "Invalid request"

    @classmethod
    def from_request_errors(cls, errors: list[dict[str, Any]]) -> "RequestError":
        """Collapse FastAPI/pydantic error entries into a single message."""
        messages = []
        for err in errors:
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            message = err.get("msg", "invalid value")
            messages.append(f"{location}: {message}" if location else message)
        return cls(detail="; ".join(messages) or cls.detail)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle domain errors."""
    logger.warning(
        "API error: %s (status=%d, path=%s)",
        exc.detail,
        exc.status_code,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies and parameters as validation errors (400)."""
    return await api_error_handler(
        request, RequestError.from_request_errors(list(exc.errors()))
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
