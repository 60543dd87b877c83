"""Request-level post interactions with bounded optimistic retries."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from core import UserId, settings
from .documents import Comment, Like, PostDocument
from .errors import ConflictError
from .interactions import add_comment, delete_comment, like_post, unlike_post
from .store import PostStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostInteractionService:
    """Applies one like/comment mutation per call and persists it.

    Every attempt reloads the post, applies the mutation and saves with a
    version check. Domain errors surface on the attempt that raised them; only
    write conflicts are retried, at most ``max_attempts`` times in total.
    """

    def __init__(self, store: PostStore, *, max_attempts: int | None = None) -> None:
        resolved_attempts = settings.post_write_max_attempts if max_attempts is None else max_attempts
        if resolved_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.max_attempts = resolved_attempts

    async def _apply(self, post_id: int, mutation: Callable[[PostDocument], T]) -> T:
        for attempt in range(1, self.max_attempts + 1):
            post = await self.store.find_by_id(post_id)
            outcome = mutation(post)
            try:
                await self.store.save(post)
            except ConflictError:
                logger.warning(
                    "Write conflict on post %s (attempt %d of %d)",
                    post_id,
                    attempt,
                    self.max_attempts,
                )
                continue
            return outcome

        logger.warning(
            "Giving up on post %s after %d conflicting attempts",
            post_id,
            self.max_attempts,
        )
        raise ConflictError()

    async def like(self, post_id: int, acting_user_id: UserId) -> list[Like]:
        return await self._apply(post_id, lambda post: like_post(post, acting_user_id))

    async def unlike(self, post_id: int, acting_user_id: UserId) -> list[Like]:
        return await self._apply(post_id, lambda post: unlike_post(post, acting_user_id))

    async def add_comment(
        self,
        post_id: int,
        acting_user_id: UserId,
        *,
        author_name: str | None,
        author_avatar: str | None,
        text: str | None,
    ) -> list[Comment]:
        return await self._apply(
            post_id,
            lambda post: add_comment(post, acting_user_id, author_name, author_avatar, text),
        )

    async def delete_comment(
        self,
        post_id: int,
        comment_id: str,
        acting_user_id: UserId,
    ) -> list[Comment]:
        return await self._apply(
            post_id,
            lambda post: delete_comment(post, comment_id, acting_user_id),
        )
