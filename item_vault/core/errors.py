"""
Error taxonomy and the translation of failures into the JSON error envelope.

Every failure leaves the service as ``{"error": "<message>"}`` with an HTTP
status: application errors carry their own status code, framework errors
(unknown route, wrong method, malformed body) are mapped by dedicated
handlers, and anything unexpected is caught by CatchAllExceptionMiddleware.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .logger import get_logger

logger = get_logger(__name__)


class ItemVaultError(Exception):
    """Base exception for the application."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidTypeError(ItemVaultError):
    """The path named a type that is not registered."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, token: str):
        super().__init__(f"Invalid type: {token}", {"type": token})
        self.token = token


class NotFoundError(ItemVaultError):
    """Valid type, but no record carries the requested id."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Not found", item_id: Optional[str] = None):
        super().__init__(message, {"id": item_id} if item_id else None)


class ConfigurationError(ItemVaultError):
    """A required external service is not configured."""


class UploadError(ItemVaultError):
    """Missing file part or a failed upload."""


class PayloadTooLargeError(UploadError):
    """Upload or request body over the configured size limit."""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class StoreError(ItemVaultError):
    """Document store or object store operation failed."""


def error_response(status_code: int, message: str) -> ORJSONResponse:
    """Build the uniform error envelope."""
    return ORJSONResponse(status_code=status_code, content={"error": message})


def _log(request: Request, status_code: int, message: str, exc: Exception) -> None:
    extra = {"path": request.url.path, "method": request.method, "status_code": status_code}
    if status_code >= 500:
        logger.error(f"Server error: {message}", exc_info=exc, extra=extra)
    else:
        logger.warning(f"Request failed: {message}", extra=extra)


async def item_vault_exception_handler(request: Request, exc: ItemVaultError) -> ORJSONResponse:
    """Handle application exceptions."""
    _log(request, exc.status_code, exc.message, exc)
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    """Handle framework HTTP exceptions (unknown route, method not allowed)."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    _log(request, exc.status_code, message, exc)
    response = error_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """Handle request validation errors such as a malformed JSON body."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg')}" if loc else str(error.get("msg")))
    message = "Invalid request: " + "; ".join(parts) if parts else "Invalid request"
    _log(request, status.HTTP_500_INTERNAL_SERVER_ERROR, message, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    """Turn any exception that escaped the handlers into a JSON 500."""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            message = str(exc) or "Internal Server Error"
            logger.error(
                f"{type(exc).__name__} on {request.url.path} (500): {message}",
                exc_info=exc,
                extra={"path": request.url.path, "method": request.method},
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


# PUBLIC_INTERFACE
def install_error_handlers(app: FastAPI) -> None:
    """Register the exception handlers and the catch-all middleware on app."""
    app.add_exception_handler(ItemVaultError, item_vault_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_middleware(CatchAllExceptionMiddleware)
