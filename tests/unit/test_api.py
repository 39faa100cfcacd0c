"""Tests for the REST adapter: auth, posts, comments, votes, error mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from threadboard.api.app import create_app
from threadboard.api.auth import create_token, decode_token
from threadboard.api.errors import status_for
from threadboard.core.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from threadboard.config.schema import ThreadboardConfig


@pytest.fixture
def client(test_config: ThreadboardConfig) -> Iterator[TestClient]:
    with TestClient(create_app(test_config)) as c:
        yield c


def _signup(client: TestClient, username: str = "alice") -> dict[str, str]:
    resp = client.post(
        "/api/auth/signup", json={"username": username, "password": "secret"}
    )
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def _create_post(client: TestClient, headers: dict[str, str], **body: str) -> str:
    payload = {"title": "Show: a thing", "content": "Details"} | body
    resp = client.post("/api/posts", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["message"] == "Post created"
    return body["data"]["post_id"]


# ── Auth ─────────────────────────────────────────────────────────


class TestAuth:
    def test_token_round_trip(self):
        token = create_token("user-1", "k", expiry_hours=1)
        assert decode_token(token, "k")["sub"] == "user-1"

    def test_signup_login_and_me(self, client: TestClient):
        headers = _signup(client)

        login = client.post(
            "/api/auth/login", json={"username": "alice", "password": "secret"}
        )
        assert login.status_code == 200
        assert login.json()["username"] == "alice"

        me = client.get("/api/auth/user", headers=headers)
        assert me.status_code == 200
        assert me.json()["username"] == "alice"

    def test_duplicate_signup_is_conflict(self, client: TestClient):
        _signup(client)
        resp = client.post(
            "/api/auth/signup", json={"username": "alice", "password": "other"}
        )
        assert resp.status_code == 409
        assert resp.json() == {
            "success": False,
            "error": "Username already used",
            "kind": "conflict",
        }

    def test_bad_password(self, client: TestClient):
        _signup(client)
        resp = client.post(
            "/api/auth/login", json={"username": "alice", "password": "wrong"}
        )
        assert resp.status_code == 401

    def test_invalid_username_rejected(self, client: TestClient):
        resp = client.post(
            "/api/auth/signup", json={"username": "no spaces", "password": "secret"}
        )
        assert resp.status_code == 422

    def test_garbage_token(self, client: TestClient):
        resp = client.get(
            "/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert resp.status_code == 401


# ── Posts ────────────────────────────────────────────────────────


class TestPosts:
    def test_create_requires_login(self, client: TestClient):
        resp = client.post("/api/posts", json={"title": "Hello", "content": "x"})
        assert resp.status_code == 401

    def test_create_requires_url_or_content(self, client: TestClient):
        headers = _signup(client)
        resp = client.post("/api/posts", json={"title": "Hello"}, headers=headers)
        assert resp.status_code == 422

    def test_create_and_get(self, client: TestClient):
        headers = _signup(client)
        post_id = _create_post(client, headers, url="https://example.com")

        resp = client.get(f"/api/posts/{post_id}")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["url"] == "https://example.com"
        assert data["points"] == 0
        assert data["author"]["username"] == "alice"
        assert data["is_upvoted"] is False

    def test_get_missing(self, client: TestClient):
        resp = client.get("/api/posts/missing")
        assert resp.status_code == 404
        assert resp.json()["kind"] == "not_found"

    def test_list_paginates(self, client: TestClient):
        headers = _signup(client)
        for i in range(3):
            _create_post(client, headers, title=f"Post number {i}")

        resp = client.get("/api/posts", params={"limit": 2, "page": 2})

        assert resp.status_code == 200
        body = resp.json()
        assert len(body["data"]) == 1
        assert body["pagination"] == {"page": 2, "total_pages": 2}

    def test_list_filters_by_site(self, client: TestClient):
        headers = _signup(client)
        _create_post(client, headers, url="https://a.example")
        _create_post(client, headers, url="https://b.example")

        resp = client.get("/api/posts", params={"site": "https://b.example"})

        assert [p["url"] for p in resp.json()["data"]] == ["https://b.example"]

    def test_invalid_page(self, client: TestClient):
        assert client.get("/api/posts", params={"page": 0}).status_code == 422


# ── Votes ────────────────────────────────────────────────────────


class TestVotes:
    def test_toggle_post(self, client: TestClient):
        headers = _signup(client)
        post_id = _create_post(client, headers)

        first = client.patch(f"/api/posts/{post_id}/upvote", headers=headers)
        assert first.json()["data"] == {"points": 1, "is_upvoted": True}

        listed = client.get("/api/posts", headers=headers).json()["data"][0]
        assert listed["is_upvoted"] is True
        anonymous = client.get("/api/posts").json()["data"][0]
        assert anonymous["is_upvoted"] is False

        second = client.patch(f"/api/posts/{post_id}/upvote", headers=headers)
        assert second.json()["data"] == {"points": 0, "is_upvoted": False}

    def test_toggle_missing_post(self, client: TestClient):
        headers = _signup(client)
        resp = client.patch("/api/posts/missing/upvote", headers=headers)
        assert resp.status_code == 404

    def test_toggle_comment(self, client: TestClient):
        headers = _signup(client)
        post_id = _create_post(client, headers)
        comment = client.post(
            f"/api/posts/{post_id}/comment", json={"content": "Nice"}, headers=headers
        ).json()["data"]

        resp = client.patch(f"/api/comments/{comment['id']}/upvote", headers=headers)

        assert resp.json()["message"] == "Comment updated"
        assert resp.json()["data"] == {"points": 1, "is_upvoted": True}

    def test_upvote_requires_login(self, client: TestClient):
        assert client.patch("/api/posts/anything/upvote").status_code == 401

    def test_vote_from_deleted_account_is_not_found(self, client: TestClient):
        headers = _signup(client)
        post_id = _create_post(client, headers)
        stale = create_token("gone-user", "test-secret-key")

        resp = client.patch(
            f"/api/posts/{post_id}/upvote",
            headers={"Authorization": f"Bearer {stale}"},
        )

        assert resp.status_code == 404
        assert resp.json()["error"] == "User not found: gone-user"
        assert client.get(f"/api/posts/{post_id}").json()["data"]["points"] == 0


# ── Comments ─────────────────────────────────────────────────────


class TestComments:
    def test_thread(self, client: TestClient):
        alice = _signup(client)
        bob = _signup(client, "bob")
        post_id = _create_post(client, alice)

        root = client.post(
            f"/api/posts/{post_id}/comment", json={"content": "First!"}, headers=bob
        )
        assert root.status_code == 201
        root_id = root.json()["data"]["id"]
        assert root.json()["data"]["depth"] == 0
        assert root.json()["data"]["author"]["username"] == "bob"

        reply = client.post(
            f"/api/comments/{root_id}", json={"content": "Welcome"}, headers=alice
        )
        assert reply.status_code == 201
        assert reply.json()["data"]["depth"] == 1
        assert reply.json()["data"]["parent_comment_id"] == root_id
        assert reply.json()["data"]["author"]["username"] == "alice"

        listed = client.get(
            f"/api/posts/{post_id}/comments", params={"include_children": True}
        ).json()["data"]
        assert [c["id"] for c in listed] == [root_id]
        assert listed[0]["comment_count"] == 1
        assert listed[0]["author"]["username"] == "bob"
        assert [c["content"] for c in listed[0]["children"]] == ["Welcome"]

        replies = client.get(f"/api/comments/{root_id}/comments").json()
        assert [c["content"] for c in replies["data"]] == ["Welcome"]

        post = client.get(f"/api/posts/{post_id}").json()["data"]
        assert post["comment_count"] == 2

    def test_comment_on_missing_post(self, client: TestClient):
        headers = _signup(client)
        resp = client.post(
            "/api/posts/missing/comment", json={"content": "Hello"}, headers=headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "Post not found: missing"

    def test_reply_to_missing_comment(self, client: TestClient):
        headers = _signup(client)
        resp = client.post(
            "/api/comments/missing", json={"content": "Hello"}, headers=headers
        )
        assert resp.status_code == 404


# ── Error mapping and health ─────────────────────────────────────


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (NotFoundError("Post", "p"), 404),
            (InvalidInputError("bad"), 400),
            (ConflictError("dup"), 409),
            (StorageError("down"), 500),
        ],
    )
    def test_status_for(self, error, status):
        assert status_for(error) == status


class TestHealth:
    def test_health(self, client: TestClient):
        assert client.get("/api/health").json() == {"status": "ok"}

    def test_detailed(self, client: TestClient):
        body = client.get("/api/health/detailed").json()
        assert body["status"] == "ok"
        assert body["components"]["database"] == {"status": "ok"}
