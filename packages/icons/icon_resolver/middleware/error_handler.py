"""Error hierarchy and FastAPI exception handlers for the HTTP surface.

The core library reports expected conditions (bad names, unknown icons,
rejected configs) through return values. The routers turn those into the
errors below, and the handlers map every error (plus Pydantic's
RequestValidationError and unhandled exceptions) to the JSON envelope:
{ success, data, error, meta }.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from icon_resolver.models.responses import ApiResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class IconResolverError(Exception):
    """Base error for all icon resolver errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class InvalidIconNameError(IconResolverError):
    """Icon name could not be parsed."""

    status_code = 422
    message = "Invalid icon name"


class IconNotFoundError(IconResolverError):
    """Icon is missing upstream or could not be loaded."""

    status_code = 404
    message = "Icon not found"


class ProviderNotConfiguredError(IconResolverError):
    """No API config registered for the provider."""

    status_code = 404
    message = "Provider not configured"


class InvalidCollectionError(IconResolverError):
    """Icon set was rejected or contained no valid icons."""

    status_code = 422
    message = "Invalid icon set"


class InvalidProviderConfigError(IconResolverError):
    """Provider config was rejected (no hosts or bad values)."""

    status_code = 422
    message = "Invalid provider config"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(status_code: int, error: str, meta: dict | None = None) -> JSONResponse:
    """Error response in the ``ApiResponse`` shape."""
    body = ApiResponse(success=False, error=error, meta=meta or None)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def _resolver_error_handler(request: Request, exc: IconResolverError) -> JSONResponse:
    """Map an ``IconResolverError`` to its status code and details."""
    logger.info(
        "%s %s -> %d %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
        extra={"error_reason": type(exc).__name__},
    )
    return _envelope(exc.status_code, exc.message, meta=exc.details)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request body and query errors field by field (422)."""
    fields = []
    for err in exc.errors():
        fields.append(
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
        )
    return _envelope(422, "Validation error", meta={"fields": fields})


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: log with traceback, answer with a generic 500."""
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"error_reason": repr(exc)},
    )
    return _envelope(500, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers above on ``app``."""
    app.add_exception_handler(IconResolverError, _resolver_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
