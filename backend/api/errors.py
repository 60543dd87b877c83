"""Translation of post errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.posts import PostError, StoreUnavailableError

logger = logging.getLogger(__name__)


async def handle_post_error(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, PostError):  # pragma: no cover - registered for PostError only
        raise exc
    if isinstance(exc, StoreUnavailableError):
        logger.error(
            "Post store unavailable during %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PostError, handle_post_error)
