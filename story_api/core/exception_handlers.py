"""Global exception handlers for consistent error responses.

Every error leaves the API as ``{"error": "<message>"}``:
- ValidationAppError -> 400 with its specific message
- StorageAppError -> 500 with a generic message
- HTTPException (404, 405) -> its status and detail
- malformed request bodies -> 400 "Invalid request body"
- anything else -> 500 "Server error", details logged server-side only

The request id travels in the X-Request-ID response header.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from story_api.core.errors import AppError, StorageAppError
from story_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"
INVALID_BODY_MESSAGE = "Invalid request body"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors.

    Storage failures are server faults and reported with a generic message;
    every other AppError is a client fault carrying its own message.
    """
    if isinstance(exc, StorageAppError):
        logger.error(
            "app_error_handled",
            extra={
                "error_code": exc.code,
                "details": exc.details,
                "status_code": 500,
                "request_path": request.url.path,
                "request_id": get_request_id(),
            },
        )
        return _error(500, SERVER_ERROR_MESSAGE)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": 400,
            "request_id": get_request_id(),
        },
    )
    return _error(400, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException (unknown routes, wrong methods) in the error shape."""
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer bodies that don't match the request schema with a 400."""
    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(exc.errors()),
            "fields": [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()],
        },
    )
    return _error(400, INVALID_BODY_MESSAGE)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging and returns a generic message; stack
    traces and exception text never reach the client.
    """
    logger.error(
        "unhandled_exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )
    return _error(500, SERVER_ERROR_MESSAGE)


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with a FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
