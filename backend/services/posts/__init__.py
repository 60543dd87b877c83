"""Post documents, their mutation rules and persistence."""

from .documents import Comment, Like, PostDocument
from .errors import (
    AlreadyLikedError,
    CommentNotFoundError,
    ConflictError,
    NotAuthorizedError,
    NotLikedError,
    PostError,
    PostNotFoundError,
    PostValidationError,
    StoreUnavailableError,
)
from .interactions import (
    MAX_COMMENT_LENGTH,
    add_comment,
    delete_comment,
    like_post,
    unlike_post,
)
from .lifecycle import MAX_POST_TEXT_LENGTH, PostLifecycle, build_post, require_post_owner
from .service import PostInteractionService
from .store import PostStore

__all__ = [
    "Comment",
    "Like",
    "PostDocument",
    "PostError",
    "PostValidationError",
    "AlreadyLikedError",
    "NotLikedError",
    "NotAuthorizedError",
    "PostNotFoundError",
    "CommentNotFoundError",
    "ConflictError",
    "StoreUnavailableError",
    "MAX_COMMENT_LENGTH",
    "MAX_POST_TEXT_LENGTH",
    "add_comment",
    "delete_comment",
    "like_post",
    "unlike_post",
    "build_post",
    "require_post_owner",
    "PostLifecycle",
    "PostInteractionService",
    "PostStore",
]
