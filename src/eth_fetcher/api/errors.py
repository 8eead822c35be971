"""Mapping of service errors to HTTP responses, and request logging."""

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from eth_fetcher.core.errors import (
    FetchError,
    InvalidCredentialsError,
    NotFoundError,
    PendingError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (PendingError, status.HTTP_409_CONFLICT),
    (FetchError, status.HTTP_502_BAD_GATEWAY),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (ValueError, status.HTTP_400_BAD_REQUEST),
]


def _make_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
        content = {"detail": str(exc)}
        # Set on resolution errors and on errors after a broadcast
        tx_hash = getattr(exc, "tx_hash", None)
        if tx_hash:
            content["txHash"] = tx_hash
        return JSONResponse(status_code=status_code, content=content)

    return handler


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected failure and answer 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register service error handlers on the app."""
    for exc_class, status_code in _STATUS_BY_ERROR:
        app.add_exception_handler(exc_class, _make_handler(status_code))
    app.add_exception_handler(Exception, unhandled_error_handler)


async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
    )
    return response
