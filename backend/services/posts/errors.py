"""Typed failures raised by post operations.

Each error carries the HTTP status the API layer answers with, so routers never
translate them by hand.
"""

from __future__ import annotations

from fastapi import status


class PostError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Post operation failed"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class PostValidationError(PostError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Text is required"


class AlreadyLikedError(PostError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Post already liked"


class NotLikedError(PostError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Post has not yet been liked"


class NotAuthorizedError(PostError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "User not authorized"


class PostNotFoundError(PostError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Post not found"


class CommentNotFoundError(PostError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Comment does not exist"


class ConflictError(PostError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Post was modified concurrently, please retry"


class StoreUnavailableError(PostError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Server error"


__all__ = [
    "PostError",
    "PostValidationError",
    "AlreadyLikedError",
    "NotLikedError",
    "NotAuthorizedError",
    "PostNotFoundError",
    "CommentNotFoundError",
    "ConflictError",
    "StoreUnavailableError",
]
