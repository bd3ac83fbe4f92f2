from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("usdrub.errors")


class RateServiceError(Exception):
    """Base class for failures of the rate acquisition layer."""


class FetchError(RateServiceError):
    """Transport failure, timeout or non-2xx response from upstream."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(RateServiceError):
    """Malformed XML, unknown charset or an unparsable numeric value."""


class NotFoundError(RateServiceError):
    """An expected field is absent from an otherwise well-formed document."""


def not_found_handler(request: Request, exc):  # type: ignore
    if getattr(exc, "status_code", status.HTTP_404_NOT_FOUND) != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": exc.errors(),
        },
    )


def rate_service_error_handler(request: Request, exc: RateServiceError):  # type: ignore
    if isinstance(exc, NotFoundError):
        code, kind = status.HTTP_404_NOT_FOUND, "rate_not_found"
    else:
        code, kind = status.HTTP_502_BAD_GATEWAY, "upstream_error"
    logger.warning("rate lookup failed: %s", exc)
    return JSONResponse(status_code=code, content={"error": kind, "detail": str(exc)})


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
