import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from forum.config import settings
from forum.pagination import QueryOptions

logger = logging.getLogger(__name__)


def listing_key(entity: str, options: QueryOptions, scope: str = "all") -> str:
    """
    Key for one page of a cached listing.

    Every option that changes the result is part of the key, so two
    requests share an entry only when they would get the same page.
    """
    return (
        f"{entity}:list:{scope}:{options.current_page}:{options.page_size}:"
        f"{options.search_property_name}:{options.search_term}:{options.category_id}"
    )


class CacheManager:
    """
    Cache-aside store for the category and post listings, backed by Redis.

    Keys are namespaced with ``settings.CACHE_KEY_PREFIX`` so several
    deployments can share one Redis database.  When Redis is unreachable the
    manager turns itself off: reads miss and writes do nothing, and the
    listings are served straight from the database.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    def _key(self, key: str) -> str:
        return f"{settings.CACHE_KEY_PREFIX}{key}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            logger.warning("Redis unavailable at %s, listing cache disabled: %s", settings.REDIS_URL, exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Listing cache connected: %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        if not self.enabled:
            return None
        try:
            raw = await self._redis.get(self._key(key))
        except RedisError as exc:
            logger.debug("Cache read failed for %r: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Dropping unreadable cache entry %r", key)
            await self.delete(key)
            return None

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        if not self.enabled:
            return
        try:
            await self._redis.set(self._key(key), json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache write failed for %r: %s", key, exc)

    async def delete(self, key: str) -> None:
        if not self.enabled:
            return
        try:
            await self._redis.delete(self._key(key))
        except RedisError as exc:
            logger.debug("Cache delete failed for %r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete every key matching *pattern*; SCAN keeps Redis responsive."""
        if not self.enabled:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=self._key(pattern))]
            if keys:
                await self._redis.delete(*keys)
        except RedisError as exc:
            logger.debug("Cache invalidation failed for %r: %s", pattern, exc)
            return
        logger.debug("Invalidated %d cache key(s) matching %r", len(keys), pattern)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    async def invalidate_categories(self) -> None:
        await self.delete_pattern("categories:*")

    async def invalidate_posts(self) -> None:
        """
        Drop every cached post listing.

        Listings embed like and comment counters, so this runs after post,
        comment and like writes alike.
        """
        await self.delete_pattern("posts:*")


# Module-level singleton shared across all request handlers.
cache = CacheManager()
