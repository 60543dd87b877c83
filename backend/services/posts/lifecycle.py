"""Creation, lookup and deletion of whole posts."""

from __future__ import annotations

from core import UserId
from .documents import PostDocument
from .errors import NotAuthorizedError
from .interactions import normalize_text
from .store import PostStore

MAX_POST_TEXT_LENGTH = 5000


def build_post(
    author_id: UserId,
    text: str | None,
    *,
    author_name: str | None = None,
    author_avatar: str | None = None,
) -> PostDocument:
    return PostDocument(
        author_id=author_id,
        author_name=author_name,
        author_avatar=author_avatar,
        text=normalize_text(text, max_length=MAX_POST_TEXT_LENGTH),
    )


def require_post_owner(post: PostDocument, acting_user_id: UserId) -> None:
    if post.author_id != acting_user_id:
        raise NotAuthorizedError()


class PostLifecycle:
    def __init__(self, store: PostStore) -> None:
        self.store = store

    async def create(
        self,
        acting_user_id: UserId,
        text: str | None,
        *,
        author_name: str | None = None,
        author_avatar: str | None = None,
    ) -> PostDocument:
        post = build_post(
            acting_user_id,
            text,
            author_name=author_name,
            author_avatar=author_avatar,
        )
        return await self.store.insert(post)

    async def get(self, post_id: int) -> PostDocument:
        return await self.store.find_by_id(post_id)

    async def list_all(self, *, limit: int | None = None, offset: int = 0) -> list[PostDocument]:
        return await self.store.list_all(limit=limit, offset=offset)

    async def delete(self, post_id: int, acting_user_id: UserId) -> None:
        """Delete a post owned by the acting user; likes and comments go with it."""
        post = await self.store.find_by_id(post_id)
        require_post_owner(post, acting_user_id)
        await self.store.remove(post_id)
