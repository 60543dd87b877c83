"""Post, like and comment endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from api.deps import (
    get_acting_user_id,
    get_current_user,
    get_post_id,
    get_post_interactions,
    get_post_lifecycle,
)
from core import UserId
from models import User
from services.posts import Comment, Like, PostDocument, PostInteractionService, PostLifecycle

router = APIRouter(prefix="/posts", tags=["posts"])
MAX_PAGE_SIZE = 100


class LikeResponse(BaseModel):
    user_id: str

    @classmethod
    def from_like(cls, like: Like) -> "LikeResponse":
        return cls(user_id=str(like.user_id))


class CommentResponse(BaseModel):
    id: str
    author_id: str
    author_name: str | None = None
    author_avatar: str | None = None
    text: str
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            author_id=str(comment.author_id),
            author_name=comment.author_name,
            author_avatar=comment.author_avatar,
            text=comment.text,
            created_at=comment.created_at,
        )


class PostResponse(BaseModel):
    id: int
    author_id: str
    author_name: str | None = None
    author_avatar: str | None = None
    text: str
    likes: list[LikeResponse]
    comments: list[CommentResponse]
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, post: PostDocument) -> "PostResponse":
        if post.id is None:
            raise ValueError("Post document missing identifier")
        return cls(
            id=post.id,
            author_id=str(post.author_id),
            author_name=post.author_name,
            author_avatar=post.author_avatar,
            text=post.text,
            likes=[LikeResponse.from_like(like) for like in post.likes],
            comments=[CommentResponse.from_comment(comment) for comment in post.comments],
            created_at=post.created_at,
        )


class PostCreateRequest(BaseModel):
    text: str | None = None


class CommentCreateRequest(BaseModel):
    text: str | None = None


def _likes(likes: list[Like]) -> list[LikeResponse]:
    return [LikeResponse.from_like(like) for like in likes]


def _comments(comments: list[Comment]) -> list[CommentResponse]:
    return [CommentResponse.from_comment(comment) for comment in comments]


@router.post("", response_model=PostResponse)
async def create_post(
    payload: PostCreateRequest,
    current_user: User = Depends(get_current_user),
    lifecycle: PostLifecycle = Depends(get_post_lifecycle),
) -> PostResponse:
    post = await lifecycle.create(
        UserId(current_user.id),
        payload.text,
        author_name=current_user.name,
        author_avatar=current_user.avatar,
    )
    return PostResponse.from_document(post)


@router.get("", response_model=list[PostResponse])
async def list_posts(
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    _: UserId = Depends(get_acting_user_id),
    lifecycle: PostLifecycle = Depends(get_post_lifecycle),
) -> list[PostResponse]:
    posts = await lifecycle.list_all(limit=limit, offset=offset)
    return [PostResponse.from_document(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    _: UserId = Depends(get_acting_user_id),
    post_id: int = Depends(get_post_id),
    lifecycle: PostLifecycle = Depends(get_post_lifecycle),
) -> PostResponse:
    return PostResponse.from_document(await lifecycle.get(post_id))


@router.delete("/{post_id}", status_code=status.HTTP_200_OK)
async def delete_post(
    acting_user_id: UserId = Depends(get_acting_user_id),
    post_id: int = Depends(get_post_id),
    lifecycle: PostLifecycle = Depends(get_post_lifecycle),
) -> dict[str, str]:
    await lifecycle.delete(post_id, acting_user_id)
    return {"detail": "Post deleted"}


@router.post("/{post_id}/likes", response_model=list[LikeResponse])
async def like_post(
    acting_user_id: UserId = Depends(get_acting_user_id),
    post_id: int = Depends(get_post_id),
    interactions: PostInteractionService = Depends(get_post_interactions),
) -> list[LikeResponse]:
    return _likes(await interactions.like(post_id, acting_user_id))


@router.delete("/{post_id}/likes", response_model=list[LikeResponse])
async def unlike_post(
    acting_user_id: UserId = Depends(get_acting_user_id),
    post_id: int = Depends(get_post_id),
    interactions: PostInteractionService = Depends(get_post_interactions),
) -> list[LikeResponse]:
    return _likes(await interactions.unlike(post_id, acting_user_id))


@router.post("/{post_id}/comments", response_model=list[CommentResponse])
async def create_comment(
    payload: CommentCreateRequest,
    current_user: User = Depends(get_current_user),
    post_id: int = Depends(get_post_id),
    interactions: PostInteractionService = Depends(get_post_interactions),
) -> list[CommentResponse]:
    comments = await interactions.add_comment(
        post_id,
        UserId(current_user.id),
        author_name=current_user.name,
        author_avatar=current_user.avatar,
        text=payload.text,
    )
    return _comments(comments)


@router.delete("/{post_id}/comments/{comment_id}", response_model=list[CommentResponse])
async def delete_comment(
    comment_id: str,
    acting_user_id: UserId = Depends(get_acting_user_id),
    post_id: int = Depends(get_post_id),
    interactions: PostInteractionService = Depends(get_post_interactions),
) -> list[CommentResponse]:
    return _comments(await interactions.delete_comment(post_id, comment_id, acting_user_id))
