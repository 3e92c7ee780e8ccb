"""Map domain exceptions to JSON error responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from backend.docchat.errors import (
    CompletionError,
    DocChatError,
    DuplicateUserError,
    StandardizationError,
    StoreError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[type[DocChatError], int] = {
    UnsupportedFormatError: 415,
    DuplicateUserError: 409,
    StandardizationError: 502,
    CompletionError: 502,
    StoreError: 503,
}


def status_for(exc: DocChatError) -> int:
    """HTTP status for a domain exception (500 when unmapped)."""
    for exc_type, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def docchat_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a DocChatError as {"detail": message}."""
    assert isinstance(exc, DocChatError)
    status_code = status_for(exc)
    logger.error(
        f"Request failed: {type(exc).__name__}",
        extra={
            "structured": {
                "error_type": type(exc).__name__,
                "message": exc.message,
                "path": request.url.path,
                "status_code": status_code,
            }
        },
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})
