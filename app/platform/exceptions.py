import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.response import api_response

logger = logging.getLogger(__name__)


class AuditError(Exception):
    """Base class for every error raised by the audit core."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


class NoSitemapFound(AuditError):
    """None of the well-known sitemap locations produced any page."""

    status_code = status.HTTP_404_NOT_FOUND


class NoPagesDiscovered(AuditError):
    """Discovery ended with an empty page list."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ScanEngineError(AuditError):
    """A single scan call failed (network error, timeout, non-2xx)."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, engine_status: Optional[int] = None):
        super().__init__(message)
        self.engine_status = engine_status


class ScannerUnavailable(AuditError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ServerUnreachable(AuditError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def add_exception_handlers(app):
    @app.exception_handler(AuditError)
    async def audit_exception_handler(request: Request, exc: AuditError):
        logger.warning(f"⚠️ {exc.__class__.__name__} on {request.url.path}: {exc}")
        return api_response(
            message=str(exc) or exc.__class__.__name__,
            status_code=exc.status_code,
            data={"error": exc.__class__.__name__},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return api_response(message=str(exc.detail) or "Error", status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return api_response(
            message="Validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            data={"errors": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return api_response(
            message="Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
