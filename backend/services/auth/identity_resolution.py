"""Email normalization and login-user resolution helpers."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import verify_password
from models import User


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_email(value: str) -> str:
    return value.strip().lower()


async def find_user_by_email(session: AsyncSession, email: str) -> User | None:
    lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
    result = await session.execute(
        select(User)
        .where(_eq(lowered_email_column, normalize_email(email)))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def registration_conflict_exists(session: AsyncSession, *, normalized_email: str) -> bool:
    return await find_user_by_email(session, normalized_email) is not None


async def resolve_login_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
) -> User | None:
    """Return the user when the credentials match, otherwise None."""
    user = await find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
