"""Like and comment mutations on a loaded post document.

These functions never touch storage. Each one checks its preconditions before
changing anything, so a raised error always leaves the document as it was.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from core import UserId
from .documents import Comment, Like, PostDocument
from .errors import (
    AlreadyLikedError,
    CommentNotFoundError,
    NotAuthorizedError,
    NotLikedError,
    PostValidationError,
)

MAX_COMMENT_LENGTH = 1000


def new_comment_id() -> str:
    return uuid4().hex


def normalize_text(text: str | None, *, max_length: int) -> str:
    normalized = (text or "").strip()
    if not normalized:
        raise PostValidationError("Text is required")
    if len(normalized) > max_length:
        raise PostValidationError(f"Text must be at most {max_length} characters")
    return normalized


def like_post(post: PostDocument, acting_user_id: UserId) -> list[Like]:
    if post.like_index(acting_user_id) is not None:
        raise AlreadyLikedError()
    post.likes.insert(0, Like(user_id=acting_user_id))
    return post.likes


def unlike_post(post: PostDocument, acting_user_id: UserId) -> list[Like]:
    # First match by forward scan; a duplicate entry, if one ever exists, stays.
    index = post.like_index(acting_user_id)
    if index is None:
        raise NotLikedError()
    del post.likes[index]
    return post.likes


def add_comment(
    post: PostDocument,
    acting_user_id: UserId,
    author_name: str | None,
    author_avatar: str | None,
    text: str | None,
) -> list[Comment]:
    comment = Comment(
        id=new_comment_id(),
        author_id=acting_user_id,
        author_name=author_name,
        author_avatar=author_avatar,
        text=normalize_text(text, max_length=MAX_COMMENT_LENGTH),
        created_at=datetime.now(timezone.utc),
    )
    post.comments.insert(0, comment)
    return post.comments


def can_delete_comment(post: PostDocument, comment: Comment, acting_user_id: UserId) -> bool:
    """Comment authors may delete their own comment.

    The post author may delete any comment on their post, including comments
    written by other users.
    """
    return comment.author_id == acting_user_id or post.author_id == acting_user_id


def delete_comment(
    post: PostDocument,
    comment_id: str,
    acting_user_id: UserId,
) -> list[Comment]:
    index = post.comment_index(comment_id)
    if index is None:
        raise CommentNotFoundError()
    if not can_delete_comment(post, post.comments[index], acting_user_id):
        raise NotAuthorizedError()
    del post.comments[index]
    return post.comments


__all__ = [
    "MAX_COMMENT_LENGTH",
    "add_comment",
    "can_delete_comment",
    "delete_comment",
    "like_post",
    "new_comment_id",
    "normalize_text",
    "unlike_post",
]
