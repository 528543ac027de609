"""
Mapping from domain errors to HTTP responses.

Body shape for every domain error: {"detail": message, "code": kind}
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from hobbygraph.errors import (
    ConcurrentModificationError,
    ConflictError,
    HobbygraphError,
    InconsistentStateError,
    LockTimeoutError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[HobbygraphError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InconsistentStateError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConcurrentModificationError: status.HTTP_503_SERVICE_UNAVAILABLE,
    LockTimeoutError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: HobbygraphError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]  # type: ignore[index]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler on ``app``."""

    @app.exception_handler(HobbygraphError)
    async def hobbygraph_error_handler(request: Request, exc: HobbygraphError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        content: dict[str, object] = {"detail": exc.message, "code": exc.code}
        if exc.details:
            content["details"] = exc.details
        headers = {"Retry-After": "1"} if status_code == status.HTTP_503_SERVICE_UNAVAILABLE else None
        return JSONResponse(status_code=status_code, content=content, headers=headers)
