"""
Tests for /api/comments — threaded comments on posts.
"""
import pytest
from httpx import AsyncClient


async def _comment(client: AsyncClient, headers: dict, post_id: int, content: str, parent_id: int | None = None):
    return await client.post(
        "/api/comments",
        json={"content": content, "post_id": post_id, "parent_comment_id": parent_id},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_add_comment(async_client: AsyncClient, user_headers, post):
    resp = await _comment(async_client, user_headers, post["id"], "Great post!")
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] > 0
    assert body["content"] == "Great post!"
    assert body["post_id"] == post["id"]
    assert body["parent_comment_id"] is None
    assert body["user"]["email"] == "user@example.com"
    assert body["count_likes"] == 0
    assert body["replies"] == []


@pytest.mark.asyncio
async def test_add_comment_requires_token(async_client: AsyncClient, post):
    resp = await async_client.post("/api/comments", json={"content": "x", "post_id": post["id"]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_add_comment_to_missing_post(async_client: AsyncClient, user_headers):
    resp = await _comment(async_client, user_headers, 99999, "Hello?")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_add_empty_comment(async_client: AsyncClient, user_headers, post):
    resp = await _comment(async_client, user_headers, post["id"], "")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_reply_to_missing_parent(async_client: AsyncClient, user_headers, post):
    resp = await _comment(async_client, user_headers, post["id"], "Reply", parent_id=99999)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_reply_must_stay_on_same_post(async_client: AsyncClient, user_headers, post, category):
    other_post = await async_client.post(
        "/api/posts",
        json={"title": "Second", "content": "Other", "category_id": category["id"]},
        headers=user_headers,
    )
    parent = await _comment(async_client, user_headers, post["id"], "On the first post")

    resp = await _comment(
        async_client, user_headers, other_post.json()["id"], "Wrong thread", parent_id=parent.json()["id"]
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_comment_tree(async_client: AsyncClient, user_headers, other_user_headers, post):
    first = (await _comment(async_client, user_headers, post["id"], "First")).json()
    second = (await _comment(async_client, other_user_headers, post["id"], "Second")).json()
    reply = (await _comment(async_client, other_user_headers, post["id"], "Reply", first["id"])).json()
    nested = (await _comment(async_client, user_headers, post["id"], "Nested", reply["id"])).json()

    resp = await async_client.get(f"/api/comments/posts/{post['id']}/comments")
    assert resp.status_code == 200
    tree = resp.json()

    # Only top-level comments at the root, newest first
    assert [c["id"] for c in tree] == [second["id"], first["id"]]
    first_node = tree[1]
    assert [r["id"] for r in first_node["replies"]] == [reply["id"]]
    assert [r["id"] for r in first_node["replies"][0]["replies"]] == [nested["id"]]
    assert tree[0]["replies"] == []
    # Every level gets absolute image URLs
    nested_user = first_node["replies"][0]["replies"][0]["user"]
    assert nested_user["image"].startswith("http://test/media/")


@pytest.mark.asyncio
async def test_comment_tree_for_missing_post(async_client: AsyncClient):
    resp = await async_client.get("/api/comments/posts/99999/comments")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_comment_counter_on_post(async_client: AsyncClient, user_headers, post):
    parent = (await _comment(async_client, user_headers, post["id"], "One")).json()
    await _comment(async_client, user_headers, post["id"], "Two", parent["id"])

    body = (await async_client.get(f"/api/posts/{post['id']}")).json()
    assert body["count_comments"] == 2


@pytest.mark.asyncio
async def test_get_comment(async_client: AsyncClient, user_headers, post):
    created = (await _comment(async_client, user_headers, post["id"], "Find me")).json()

    resp = await async_client.get(f"/api/comments/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["content"] == "Find me"
    assert resp.json()["user"]["first_name"] == "Alex"


@pytest.mark.asyncio
async def test_get_missing_comment(async_client: AsyncClient):
    resp = await async_client.get("/api/comments/99999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_comment(async_client: AsyncClient, user_headers, moderator_headers, post):
    created = (await _comment(async_client, user_headers, post["id"], "Typo")).json()

    resp = await async_client.put(
        f"/api/comments/{created['id']}", json={"content": "Fixed"}, headers=moderator_headers
    )
    assert resp.status_code == 204
    assert (await async_client.get(f"/api/comments/{created['id']}")).json()["content"] == "Fixed"


@pytest.mark.asyncio
async def test_update_comment_forbidden_for_user(async_client: AsyncClient, user_headers, post):
    created = (await _comment(async_client, user_headers, post["id"], "Mine")).json()
    resp = await async_client.put(
        f"/api/comments/{created['id']}", json={"content": "Edit"}, headers=user_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_update_missing_comment(async_client: AsyncClient, admin_headers):
    resp = await async_client.put("/api/comments/99999", json={"content": "x"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Comment not found."


@pytest.mark.asyncio
async def test_delete_comment_removes_replies(async_client: AsyncClient, user_headers, admin_headers, post):
    parent = (await _comment(async_client, user_headers, post["id"], "Parent")).json()
    child = (await _comment(async_client, user_headers, post["id"], "Child", parent["id"])).json()

    resp = await async_client.delete(f"/api/comments/{parent['id']}", headers=admin_headers)
    assert resp.status_code == 204

    assert (await async_client.get(f"/api/comments/{child['id']}")).status_code == 404
    assert (await async_client.get(f"/api/comments/posts/{post['id']}/comments")).json() == []


@pytest.mark.asyncio
async def test_delete_missing_comment(async_client: AsyncClient, admin_headers):
    resp = await async_client.delete("/api/comments/99999", headers=admin_headers)
    assert resp.status_code == 404
