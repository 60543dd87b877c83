"""Tests for post, like and comment endpoints."""

import asyncio
import logging
from uuid import uuid4

import pytest
from fastapi import Depends, FastAPI, status
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db, get_post_interactions, get_post_store
from services.posts import ConflictError, PostDocument, PostInteractionService, PostStore


def make_user_payload(prefix: str) -> dict[str, str]:
    suffix = uuid4().hex[:8]
    return {
        "name": f"{prefix.title()} {suffix}",
        "email": f"{prefix}_{suffix}@example.com",
        "password": "Sup3rSecret!",
    }


async def register_user(client: AsyncClient, prefix: str) -> tuple[str, dict[str, str]]:
    """Register and log in a user; return their id and bearer headers."""
    payload = make_user_payload(prefix)
    registered = await client.post("/api/v1/auth/register", json=payload)
    assert registered.status_code == 201
    login = await client.post(
        "/api/v1/auth/login",
        json={"email": payload["email"], "password": payload["password"]},
    )
    assert login.status_code == 200
    token = login.json()["access_token"]
    return registered.json()["id"], {"Authorization": f"Bearer {token}"}


async def create_post(client: AsyncClient, headers: dict[str, str], text: str = "hello") -> dict:
    response = await client.post("/api/v1/posts", json={"text": text}, headers=headers)
    assert response.status_code == 200
    return response.json()


class AlwaysConflictingStore(PostStore):
    async def save(self, post: PostDocument) -> PostDocument:
        raise ConflictError()


@pytest.mark.asyncio
async def test_create_and_get_post(async_client: AsyncClient):
    author_id, headers = await register_user(async_client, "author")

    created = await create_post(async_client, headers, "  First post!  ")
    assert created["text"] == "First post!"
    assert created["author_id"] == author_id
    assert created["author_name"].startswith("Author")
    assert created["author_avatar"].startswith("https://www.gravatar.com/avatar/")
    assert created["likes"] == []
    assert created["comments"] == []

    response = await async_client.get(f"/api/v1/posts/{created['id']}", headers=headers)
    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_list_posts_newest_first(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    _, reader_headers = await register_user(async_client, "reader")

    first = await create_post(async_client, author_headers, "first")
    second = await create_post(async_client, reader_headers, "second")
    third = await create_post(async_client, author_headers, "third")

    response = await async_client.get("/api/v1/posts", headers=reader_headers)
    assert response.status_code == 200
    assert [post["id"] for post in response.json()] == [third["id"], second["id"], first["id"]]

    paged = await async_client.get(
        "/api/v1/posts",
        params={"limit": 1, "offset": 1},
        headers=reader_headers,
    )
    assert [post["id"] for post in paged.json()] == [second["id"]]


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "    "])
async def test_create_post_requires_text(async_client: AsyncClient, text: str):
    _, headers = await register_user(async_client, "author")

    response = await async_client.post("/api/v1/posts", json={"text": text}, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Text is required"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"text": None}])
async def test_create_post_rejects_missing_text(async_client: AsyncClient, payload: dict):
    _, headers = await register_user(async_client, "author")

    response = await async_client.post("/api/v1/posts", json=payload, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Text is required"


@pytest.mark.asyncio
async def test_post_routes_require_auth(async_client: AsyncClient):
    assert (await async_client.get("/api/v1/posts")).status_code == 401
    assert (await async_client.post("/api/v1/posts", json={"text": "hi"})).status_code == 401
    assert (await async_client.post("/api/v1/posts/1/likes")).status_code == 401
    assert (await async_client.delete("/api/v1/posts/1")).status_code == 401


@pytest.mark.asyncio
async def test_get_post_not_found(async_client: AsyncClient):
    _, headers = await register_user(async_client, "viewer")

    response = await async_client.get("/api/v1/posts/999", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"


@pytest.mark.asyncio
async def test_like_and_unlike_post(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    viewer_id, viewer_headers = await register_user(async_client, "viewer")
    post = await create_post(async_client, author_headers)
    likes_url = f"/api/v1/posts/{post['id']}/likes"

    liked = await async_client.post(likes_url, headers=viewer_headers)
    assert liked.status_code == 200
    assert liked.json() == [{"user_id": viewer_id}]

    again = await async_client.post(likes_url, headers=viewer_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Post already liked"

    unliked = await async_client.delete(likes_url, headers=viewer_headers)
    assert unliked.status_code == 200
    assert unliked.json() == []

    not_liked = await async_client.delete(likes_url, headers=viewer_headers)
    assert not_liked.status_code == 400
    assert not_liked.json()["detail"] == "Post has not yet been liked"


@pytest.mark.asyncio
async def test_like_missing_post_returns_not_found(async_client: AsyncClient):
    _, headers = await register_user(async_client, "viewer")

    response = await async_client.post("/api/v1/posts/12345/likes", headers=headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("post_id", ["not-an-id", "-1", "0", "1.5", "99999999999999999999"])
async def test_malformed_post_id_is_not_found(async_client: AsyncClient, post_id: str):
    _, headers = await register_user(async_client, "viewer")
    post_url = f"/api/v1/posts/{post_id}"

    fetched = await async_client.get(post_url, headers=headers)
    assert fetched.status_code == 404
    assert fetched.json()["detail"] == "Post not found"

    deleted = await async_client.delete(post_url, headers=headers)
    assert deleted.status_code == 404

    liked = await async_client.post(f"{post_url}/likes", headers=headers)
    assert liked.status_code == 404

    commented = await async_client.post(
        f"{post_url}/comments", json={"text": "hi"}, headers=headers
    )
    assert commented.status_code == 404


@pytest.mark.asyncio
async def test_malformed_post_id_still_requires_auth(async_client: AsyncClient):
    response = await async_client.get("/api/v1/posts/not-an-id")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_comment_endpoint(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    commenter_id, commenter_headers = await register_user(async_client, "commenter")
    post = await create_post(async_client, author_headers)
    comments_url = f"/api/v1/posts/{post['id']}/comments"

    first = await async_client.post(comments_url, json={"text": "first"}, headers=commenter_headers)
    assert first.status_code == 200
    second = await async_client.post(comments_url, json={"text": "second"}, headers=author_headers)
    assert second.status_code == 200

    comments = second.json()
    assert [comment["text"] for comment in comments] == ["second", "first"]
    assert comments[1]["author_id"] == commenter_id
    assert comments[1]["author_name"].startswith("Commenter")
    assert comments[1]["author_avatar"].startswith("https://www.gravatar.com/avatar/")

    blank = await async_client.post(comments_url, json={"text": "  "}, headers=commenter_headers)
    assert blank.status_code == 400

    stored = await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)
    assert len(stored.json()["comments"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"text": None}])
async def test_create_comment_rejects_missing_text(async_client: AsyncClient, payload: dict):
    _, headers = await register_user(async_client, "author")
    post = await create_post(async_client, headers)
    comments_url = f"/api/v1/posts/{post['id']}/comments"

    response = await async_client.post(comments_url, json=payload, headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Text is required"

    stored = await async_client.get(f"/api/v1/posts/{post['id']}", headers=headers)
    assert stored.json()["comments"] == []


@pytest.mark.asyncio
async def test_delete_comment_removes_requested_comment_only(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    _, commenter_headers = await register_user(async_client, "commenter")
    post = await create_post(async_client, author_headers)
    comments_url = f"/api/v1/posts/{post['id']}/comments"

    for text in ["oldest", "middle", "newest"]:
        await async_client.post(comments_url, json={"text": text}, headers=commenter_headers)
    current = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()
    target = next(comment for comment in current["comments"] if comment["text"] == "oldest")

    response = await async_client.delete(f"{comments_url}/{target['id']}", headers=commenter_headers)
    assert response.status_code == 200
    assert [comment["text"] for comment in response.json()] == ["newest", "middle"]


@pytest.mark.asyncio
async def test_delete_comment_rejects_unrelated_user(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    _, commenter_headers = await register_user(async_client, "commenter")
    _, outsider_headers = await register_user(async_client, "outsider")
    post = await create_post(async_client, author_headers)
    comments_url = f"/api/v1/posts/{post['id']}/comments"
    created = await async_client.post(comments_url, json={"text": "hands off"}, headers=commenter_headers)
    comment_id = created.json()[0]["id"]
    before = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()

    response = await async_client.delete(f"{comments_url}/{comment_id}", headers=outsider_headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "User not authorized"

    after = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()
    assert after == before


@pytest.mark.asyncio
async def test_delete_missing_comment_returns_not_found(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    post = await create_post(async_client, author_headers)

    response = await async_client.delete(
        f"/api/v1/posts/{post['id']}/comments/{uuid4().hex}",
        headers=author_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Comment does not exist"


@pytest.mark.asyncio
async def test_delete_post_requires_author(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    _, other_headers = await register_user(async_client, "other")
    post = await create_post(async_client, author_headers)
    await async_client.post(f"/api/v1/posts/{post['id']}/likes", headers=other_headers)
    before = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()

    forbidden = await async_client.delete(f"/api/v1/posts/{post['id']}", headers=other_headers)
    assert forbidden.status_code == 401
    after = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()
    assert after == before

    deleted = await async_client.delete(f"/api/v1/posts/{post['id']}", headers=author_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"detail": "Post deleted"}

    missing = await async_client.delete(f"/api/v1/posts/{post['id']}", headers=author_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_post_interaction_scenario(async_client: AsyncClient):
    _, headers_a = await register_user(async_client, "alice")
    user_b, headers_b = await register_user(async_client, "bob")
    user_c, headers_c = await register_user(async_client, "carol")
    post = await create_post(async_client, headers_a, "hello")
    post_url = f"/api/v1/posts/{post['id']}"

    liked = await async_client.post(f"{post_url}/likes", headers=headers_b)
    assert liked.json() == [{"user_id": user_b}]

    liked_again = await async_client.post(f"{post_url}/likes", headers=headers_b)
    assert liked_again.status_code == 400
    current = (await async_client.get(post_url, headers=headers_a)).json()
    assert current["likes"] == [{"user_id": user_b}]

    commented = await async_client.post(f"{post_url}/comments", json={"text": "nice"}, headers=headers_c)
    comments = commented.json()
    assert [(comment["author_id"], comment["text"]) for comment in comments] == [(user_c, "nice")]

    removed = await async_client.delete(f"{post_url}/comments/{comments[0]['id']}", headers=headers_a)
    assert removed.status_code == 200
    assert removed.json() == []

    not_owner = await async_client.delete(post_url, headers=headers_b)
    assert not_owner.status_code == 401

    deleted = await async_client.delete(post_url, headers=headers_a)
    assert deleted.status_code == 200
    gone = await async_client.get(post_url, headers=headers_a)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_likes_from_distinct_users(async_client: AsyncClient):
    _, author_headers = await register_user(async_client, "author")
    likers = [await register_user(async_client, f"liker{index}") for index in range(5)]
    post = await create_post(async_client, author_headers)
    likes_url = f"/api/v1/posts/{post['id']}/likes"

    responses = await asyncio.gather(
        *(async_client.post(likes_url, headers=headers) for _, headers in likers)
    )
    assert [response.status_code for response in responses] == [200] * len(likers)

    stored = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=author_headers)).json()
    assert sorted(like["user_id"] for like in stored["likes"]) == sorted(
        user_id for user_id, _ in likers
    )


@pytest.mark.asyncio
async def test_exhausted_retries_return_conflict(async_client: AsyncClient, app: FastAPI):
    _, headers = await register_user(async_client, "author")
    post = await create_post(async_client, headers)

    def conflicting_interactions(session: AsyncSession = Depends(get_db)) -> PostInteractionService:
        return PostInteractionService(AlwaysConflictingStore(session), max_attempts=2)

    app.dependency_overrides[get_post_interactions] = conflicting_interactions
    try:
        response = await async_client.post(f"/api/v1/posts/{post['id']}/likes", headers=headers)
    finally:
        del app.dependency_overrides[get_post_interactions]

    assert response.status_code == 409
    stored = (await async_client.get(f"/api/v1/posts/{post['id']}", headers=headers)).json()
    assert stored["likes"] == []


@pytest.mark.asyncio
async def test_store_failure_is_logged_and_reported_generically(
    async_client: AsyncClient,
    app: FastAPI,
    caplog: pytest.LogCaptureFixture,
):
    _, headers = await register_user(async_client, "author")

    class BrokenSession:
        async def execute(self, *args, **kwargs):
            raise OperationalError("SELECT posts", {}, Exception("connection refused"))

        async def rollback(self) -> None:
            return None

    app.dependency_overrides[get_post_store] = lambda: PostStore(BrokenSession())  # type: ignore[arg-type]
    try:
        with caplog.at_level(logging.ERROR, logger="api.errors"):
            response = await async_client.get("/api/v1/posts/1", headers=headers)
    finally:
        del app.dependency_overrides[get_post_store]

    assert response.status_code == 503
    assert response.json() == {"detail": "Server error"}
    assert "connection refused" not in response.text
    assert "Post store unavailable" in caplog.text
