"""In-memory representation of a post document and its sub-entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core import UserId
from models import Post


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(slots=True)
class Like:
    user_id: UserId

    def to_json(self) -> dict[str, Any]:
        return {"user_id": str(self.user_id)}

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Like":
        return cls(user_id=UserId(data["user_id"]))


@dataclass(slots=True)
class Comment:
    id: str
    author_id: UserId
    author_name: str | None
    author_avatar: str | None
    text: str
    created_at: datetime

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author_id": str(self.author_id),
            "author_name": self.author_name,
            "author_avatar": self.author_avatar,
            "text": self.text,
            "created_at": ensure_aware(self.created_at).isoformat(),
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            id=data["id"],
            author_id=UserId(data["author_id"]),
            author_name=data.get("author_name"),
            author_avatar=data.get("author_avatar"),
            text=data["text"],
            created_at=ensure_aware(datetime.fromisoformat(data["created_at"])),
        )


@dataclass(slots=True)
class PostDocument:
    """A post as loaded by one request.

    ``version`` is the stored version the document was read at; the store only
    accepts a save when the row still carries it.
    """

    author_id: UserId
    text: str
    author_name: str | None = None
    author_avatar: str | None = None
    likes: list[Like] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None
    version: int = 1

    def like_index(self, user_id: UserId) -> int | None:
        for index, like in enumerate(self.likes):
            if like.user_id == user_id:
                return index
        return None

    def comment_index(self, comment_id: str) -> int | None:
        for index, comment in enumerate(self.comments):
            if comment.id == comment_id:
                return index
        return None

    def likes_payload(self) -> list[dict[str, Any]]:
        return [like.to_json() for like in self.likes]

    def comments_payload(self) -> list[dict[str, Any]]:
        return [comment.to_json() for comment in self.comments]

    @classmethod
    def from_record(cls, record: Post) -> "PostDocument":
        return cls(
            id=record.id,
            author_id=UserId(record.author_id),
            author_name=record.author_name,
            author_avatar=record.author_avatar,
            text=record.text,
            likes=[Like.from_json(item) for item in record.likes or []],
            comments=[Comment.from_json(item) for item in record.comments or []],
            created_at=ensure_aware(record.created_at) if record.created_at else None,
            version=record.version,
        )

    def to_record(self) -> Post:
        record = Post(
            author_id=str(self.author_id),
            author_name=self.author_name,
            author_avatar=self.author_avatar,
            text=self.text,
            likes=self.likes_payload(),
            comments=self.comments_payload(),
            version=self.version,
        )
        if self.created_at is not None:
            record.created_at = self.created_at
        return record
