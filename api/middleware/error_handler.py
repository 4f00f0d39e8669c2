"""
Global exception handlers and structured error responses.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logger import get_logger

logger = get_logger(__name__)


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "internal_error"
        self.details = details or {}
        super().__init__(self.message)


def error_body(message: str, error_code: str, **extra: Any) -> Dict[str, Any]:
    """Build the ``{"error": {...}}`` envelope shared by every handler."""
    return {"error": {"message": message, "error_code": error_code, **extra}}


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse: Structured error response
    """
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "An internal server error occurred",
            "internal_error",
            path=request.url.path,
            method=request.method
        )
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for HTTP exceptions."""
    logger.warning(
        "HTTP exception",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        detail=str(exc.detail)
    )

    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), f"http_{exc.status_code}", path=request.url.path)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handler for validation errors.

    Returns:
        JSONResponse: Structured error response with per-field details
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg"),
            "type": error.get("type")
        }
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error",
        path=request.url.path,
        method=request.method,
        errors=errors
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Validation error", "validation_error", details=errors)
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handler for APIError exceptions."""
    logger.warning(
        "API error",
        path=request.url.path,
        method=request.method,
        error_code=exc.error_code,
        message=exc.message
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, details=exc.details)
    )
