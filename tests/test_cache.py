"""
Tests for forum.cache — key building, namespacing, the disabled mode, and
listing invalidation through the API.

The endpoint tests request ``redis_cache`` so the shared CacheManager runs
against the in-memory FakeRedis from conftest.  Each one warms a cached
listing, performs a write, and checks the next read reflects it.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import update

from forum.cache import CacheManager, listing_key
from forum.config import settings
from forum.models import Post
from forum.pagination import QueryOptions


def _manager(client=None) -> CacheManager:
    manager = CacheManager()
    manager._redis = client
    return manager


def _cached_keys(fake_redis, entity: str) -> list[str]:
    prefix = f"{settings.CACHE_KEY_PREFIX}{entity}:"
    return [key for key in fake_redis.data if key.startswith(prefix)]


async def _posts(client: AsyncClient) -> dict:
    resp = await client.get("/api/posts")
    assert resp.status_code == 200
    return resp.json()


async def _categories_page(client: AsyncClient) -> dict:
    resp = await client.get("/api/categories/paged")
    assert resp.status_code == 200
    return resp.json()


async def _me(client: AsyncClient, headers: dict) -> dict:
    return (await client.get("/api/auth/me", headers=headers)).json()


# ---------------------------------------------------------------------------
# CacheManager
# ---------------------------------------------------------------------------

def test_listing_key_covers_every_option():
    a = listing_key("posts", QueryOptions(current_page=1, page_size=5))
    b = listing_key("posts", QueryOptions(current_page=2, page_size=5))
    c = listing_key("posts", QueryOptions(current_page=1, page_size=5, category_id=3))
    d = listing_key("posts", QueryOptions(current_page=1, page_size=5, search_property_name="Title", search_term="x"))
    assert len({a, b, c, d}) == 4
    assert a.startswith("posts:list:all:")


@pytest.mark.asyncio
async def test_values_round_trip_under_prefix(fake_redis):
    manager = _manager(fake_redis)

    await manager.set("categories:all", [{"id": 1, "name": "News"}], ttl=30)

    assert list(fake_redis.data) == [f"{settings.CACHE_KEY_PREFIX}categories:all"]
    assert await manager.get("categories:all") == [{"id": 1, "name": "News"}]


@pytest.mark.asyncio
async def test_invalidate_posts_leaves_categories(fake_redis):
    manager = _manager(fake_redis)
    await manager.set("posts:list:all:1:5:None:None:None", {"items": []})
    await manager.set("categories:all", [])

    await manager.invalidate_posts()

    assert await manager.get("posts:list:all:1:5:None:None:None") is None
    assert await manager.get("categories:all") == []


@pytest.mark.asyncio
async def test_unreadable_entry_is_dropped(fake_redis):
    fake_redis.data[f"{settings.CACHE_KEY_PREFIX}categories:all"] = "{not json"
    manager = _manager(fake_redis)

    assert await manager.get("categories:all") is None
    assert fake_redis.data == {}


@pytest.mark.asyncio
async def test_redis_errors_read_as_misses(fake_redis):
    fake_redis.fail = True
    manager = _manager(fake_redis)

    await manager.set("categories:all", [])
    assert await manager.get("categories:all") is None
    await manager.invalidate_categories()


@pytest.mark.asyncio
async def test_disabled_cache_is_a_no_op():
    manager = _manager()
    assert not manager.enabled

    await manager.set("categories:all", [])
    assert await manager.get("categories:all") is None
    await manager.invalidate_posts()


# ---------------------------------------------------------------------------
# Post listings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_post_listing_is_served_from_cache(async_client: AsyncClient, db_session, redis_cache, post):
    assert (await _posts(async_client))["items"][0]["title"] == "First post"
    assert _cached_keys(redis_cache, "posts")

    # A change made behind the service layer is not seen until the entry goes
    await db_session.execute(update(Post).where(Post.id == post["id"]).values(title="Changed"))
    await db_session.commit()

    assert (await _posts(async_client))["items"][0]["title"] == "First post"


@pytest.mark.asyncio
async def test_new_post_refreshes_listing(async_client: AsyncClient, redis_cache, user_headers, post, category):
    assert (await _posts(async_client))["total"] == 1

    await async_client.post(
        "/api/posts",
        json={"title": "Second", "content": "More", "category_id": category["id"]},
        headers=user_headers,
    )

    listing = await _posts(async_client)
    assert listing["total"] == 2
    assert listing["items"][0]["title"] == "Second"


@pytest.mark.asyncio
async def test_post_edit_refreshes_listing(
    async_client: AsyncClient, redis_cache, moderator_headers, post, category
):
    await _posts(async_client)

    resp = await async_client.put(
        f"/api/posts/{post['id']}",
        json={"title": "Edited", "content": "New body", "category_id": category["id"]},
        headers=moderator_headers,
    )
    assert resp.status_code == 204

    assert (await _posts(async_client))["items"][0]["title"] == "Edited"


@pytest.mark.asyncio
async def test_post_delete_refreshes_listing(async_client: AsyncClient, redis_cache, admin_headers, post):
    await _posts(async_client)

    resp = await async_client.delete(f"/api/posts/{post['id']}", headers=admin_headers)
    assert resp.status_code == 204

    listing = await _posts(async_client)
    assert listing["total"] == 0
    assert listing["items"] == []


@pytest.mark.asyncio
async def test_comment_refreshes_listing(async_client: AsyncClient, redis_cache, admin_headers, user_headers, post):
    await _posts(async_client)

    created = await async_client.post(
        "/api/comments", json={"content": "Nice", "post_id": post["id"]}, headers=user_headers
    )
    assert (await _posts(async_client))["items"][0]["count_comments"] == 1

    await async_client.delete(f"/api/comments/{created.json()['id']}", headers=admin_headers)
    assert (await _posts(async_client))["items"][0]["count_comments"] == 0


@pytest.mark.asyncio
async def test_post_like_refreshes_listing(async_client: AsyncClient, redis_cache, other_user_headers, post):
    await _posts(async_client)

    await async_client.post("/api/post-likes", json={"post_id": post["id"]}, headers=other_user_headers)
    assert (await _posts(async_client))["items"][0]["count_likes"] == 1

    await async_client.post(
        "/api/post-likes", json={"post_id": post["id"], "is_like": False}, headers=other_user_headers
    )
    assert (await _posts(async_client))["items"][0]["count_likes"] == -1

    await async_client.delete(f"/api/post-likes/{post['id']}", headers=other_user_headers)
    assert (await _posts(async_client))["items"][0]["count_likes"] == 0


# ---------------------------------------------------------------------------
# Category writes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_category_writes_refresh_category_listings(async_client: AsyncClient, redis_cache, admin_headers):
    assert (await _categories_page(async_client))["total"] == 0
    assert (await async_client.get("/api/categories")).json() == []

    created = await async_client.post("/api/categories", json={"name": "News"}, headers=admin_headers)
    category_id = created.json()["id"]
    assert (await _categories_page(async_client))["total"] == 1
    assert [c["name"] for c in (await async_client.get("/api/categories")).json()] == ["News"]

    await async_client.put(f"/api/categories/{category_id}", json={"name": "Updates"}, headers=admin_headers)
    assert (await _categories_page(async_client))["items"][0]["name"] == "Updates"

    await async_client.delete(f"/api/categories/{category_id}", headers=admin_headers)
    assert (await _categories_page(async_client))["total"] == 0


@pytest.mark.asyncio
async def test_category_rename_refreshes_post_listing(
    async_client: AsyncClient, redis_cache, admin_headers, post, category
):
    await _posts(async_client)

    await async_client.put(f"/api/categories/{category['id']}", json={"name": "Coding"}, headers=admin_headers)

    assert (await _posts(async_client))["items"][0]["category_name"] == "Coding"


# ---------------------------------------------------------------------------
# User writes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_user_rename_refreshes_post_listing(async_client: AsyncClient, redis_cache, user_headers, post):
    assert (await _posts(async_client))["items"][0]["user"]["first_name"] == "Alex"

    resp = await async_client.put(
        "/api/users", data={"first_name": "Alexa", "last_name": "Stone"}, headers=user_headers
    )
    assert resp.status_code == 200

    author = (await _posts(async_client))["items"][0]["user"]
    assert (author["first_name"], author["last_name"]) == ("Alexa", "Stone")


@pytest.mark.asyncio
async def test_role_change_refreshes_post_listing(
    async_client: AsyncClient, redis_cache, admin_headers, user_headers, post
):
    assert (await _posts(async_client))["items"][0]["user"]["role"]["name"] == "User"
    me = await _me(async_client, user_headers)
    roles = {r["name"]: r["id"] for r in (await async_client.get("/api/roles")).json()}

    resp = await async_client.patch(
        f"/api/users/{me['id']}", json={"role_id": roles["Moderator"]}, headers=admin_headers
    )
    assert resp.status_code == 204

    assert (await _posts(async_client))["items"][0]["user"]["role"]["name"] == "Moderator"


@pytest.mark.asyncio
async def test_user_delete_drops_their_posts_from_listing(
    async_client: AsyncClient, redis_cache, admin_headers, user_headers, post
):
    assert (await _posts(async_client))["total"] == 1
    me = await _me(async_client, user_headers)

    resp = await async_client.delete(f"/api/users/{me['id']}", headers=admin_headers)
    assert resp.status_code == 204

    assert (await async_client.get(f"/api/posts/{post['id']}")).status_code == 404
    listing = await _posts(async_client)
    assert listing["total"] == 0
    assert listing["items"] == []
