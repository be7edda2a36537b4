"""
Domain Exception Handler.

Translates ``UniPivotError`` subclasses raised by services and dependencies
into JSON error responses with the status code the error class declares.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from unipivot.core.exceptions import AuthenticationError, UniPivotError
from unipivot.core.logging_config import get_logger

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: UniPivotError) -> JSONResponse:
    """
    Render a domain error.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain error that was raised

    Returns:
        JSONResponse with ``detail`` and ``error_type``
    """
    logger.info(
        f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": exc.status_code,
            "error_type": type(exc).__name__,
        },
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__},
        headers=headers,
    )
