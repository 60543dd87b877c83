"""SQL-backed persistence for post documents."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, cast

from sqlalchemy import delete, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Post
from .documents import PostDocument
from .errors import ConflictError, PostNotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


class PostStore:
    """Reads and writes whole post documents through one session.

    ``save`` is a compare-and-swap on ``Post.version``: it only succeeds when the
    stored row still has the version the document was loaded at.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def _guard(self) -> AsyncIterator[None]:
        try:
            yield
        except DBAPIError as exc:
            await self._session.rollback()
            raise StoreUnavailableError() from exc

    async def find_by_id(self, post_id: int) -> PostDocument:
        post_entity = cast(Any, Post)
        async with self._guard():
            result = await self._session.execute(
                select(post_entity)
                .where(_eq(Post.id, post_id))
                .limit(1)
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one_or_none()
        if record is None:
            raise PostNotFoundError()
        return PostDocument.from_record(record)

    async def list_all(self, *, limit: int | None = None, offset: int = 0) -> list[PostDocument]:
        post_entity = cast(Any, Post)
        query = (
            select(post_entity)
            .order_by(
                _desc(Post.created_at),
                _desc(Post.id),
            )
            .execution_options(populate_existing=True)
        )
        if offset > 0:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        async with self._guard():
            result = await self._session.execute(query)
            records = result.scalars().all()
        return [PostDocument.from_record(record) for record in records]

    async def insert(self, post: PostDocument) -> PostDocument:
        record = post.to_record()
        async with self._guard():
            self._session.add(record)
            await self._session.commit()
            await self._session.refresh(record)
        logger.info("Created post %s for author %s", record.id, record.author_id)
        return PostDocument.from_record(record)

    async def save(self, post: PostDocument) -> PostDocument:
        if post.id is None:
            raise ValueError("Cannot save a post that has not been inserted")

        statement = (
            update(Post)
            .where(_eq(Post.id, post.id), _eq(Post.version, post.version))
            .values(
                likes=post.likes_payload(),
                comments=post.comments_payload(),
                version=post.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._guard():
            result = cast("CursorResult[Any]", await self._session.execute(statement))
            if result.rowcount != 1:
                await self._session.rollback()
                raise ConflictError()
            await self._session.commit()
        post.version += 1
        return post

    async def remove(self, post_id: int) -> None:
        statement = (
            delete(Post)
            .where(_eq(Post.id, post_id))
            .execution_options(synchronize_session=False)
        )
        async with self._guard():
            result = cast("CursorResult[Any]", await self._session.execute(statement))
            if result.rowcount != 1:
                await self._session.rollback()
                raise PostNotFoundError()
            await self._session.commit()
        logger.info("Removed post %s", post_id)
