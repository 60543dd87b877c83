"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from core import UserId, decode_token
from db import get_session
from models import User
from services.auth import ACCESS_COOKIE
from services.posts import PostInteractionService, PostLifecycle, PostNotFoundError, PostStore

# Largest value an INTEGER primary key column can hold.
MAX_POST_ID = 2**63 - 1


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("authorization")
    if not authorization:
        return None

    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = value.strip()
    return token or None


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the acting user from a bearer header or the access cookie."""
    token = _extract_bearer_token(request) or request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise _unauthenticated("Not authenticated")

    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise _unauthenticated(str(exc)) from exc

    subject = payload.get("sub")
    if payload.get("type") != "access" or not isinstance(subject, str) or not subject.strip():
        raise _unauthenticated("Invalid token")

    user = await session.get(User, subject.strip())
    if user is None:
        raise _unauthenticated("Invalid token")
    return user


def get_acting_user_id(current_user: User = Depends(get_current_user)) -> UserId:
    return UserId(current_user.id)


def get_post_id(post_id: str) -> int:
    """Parse the path identifier; anything that cannot name a post is a miss."""
    if not post_id.isascii() or not post_id.isdigit():
        raise PostNotFoundError()
    parsed = int(post_id)
    if not 1 <= parsed <= MAX_POST_ID:
        raise PostNotFoundError()
    return parsed


def get_post_store(session: AsyncSession = Depends(get_db)) -> PostStore:
    return PostStore(session)


def get_post_lifecycle(store: PostStore = Depends(get_post_store)) -> PostLifecycle:
    return PostLifecycle(store)


def get_post_interactions(store: PostStore = Depends(get_post_store)) -> PostInteractionService:
    return PostInteractionService(store)
