"""
Post service — business rules for posts.

Design notes
------------
- Paged listings are cached (Redis, cache-aside) under keys that encode
  every option that changes the result.  Any write that changes what a
  listing shows (post, comment, like) calls ``cache.invalidate_posts()``.
  View counter bumps do not invalidate; listings tolerate views that are up
  to ``CACHE_TTL_LIST`` seconds stale.
- Author and category existence are checked here, before the INSERT, so a
  bad ``category_id`` is a 400 rather than an integrity error.
- Service functions flush but do not commit; the transaction boundary is
  owned by the ``get_db`` dependency.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from forum.cache import cache, listing_key
from forum.config import settings
from forum.exceptions import BadRequestError, NotFoundError
from forum.mapping import page_to_response, post_to_detail, post_to_model
from forum.models import Post
from forum.pagination import QueryOptions
from forum.repositories import CategoryRepository, PostRepository, UserRepository
from forum.schemas import PaginatedResponse, PostCreate, PostDetail, PostResponse

logger = logging.getLogger(__name__)

_NOT_FOUND = "Post not found."


async def _ensure_category(db: AsyncSession, category_id: int) -> None:
    if await CategoryRepository(db).get_by_id(category_id) is None:
        raise BadRequestError(f"Category {category_id} does not exist.")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_paged(db: AsyncSession, options: QueryOptions) -> PaginatedResponse[PostResponse]:
    cache_key = listing_key("posts", options)
    cached = await cache.get(cache_key)
    if cached is not None:
        return PaginatedResponse[PostResponse](**cached)

    page = await PostRepository(db).get_paged(options)
    response = page_to_response(page, post_to_model)
    await cache.set(cache_key, response.model_dump(mode="json"), ttl=settings.CACHE_TTL_LIST)
    return response


async def get_by_user(
    db: AsyncSession, options: QueryOptions, user_id: int
) -> PaginatedResponse[PostResponse]:
    page = await PostRepository(db).get_by_user_paged(options, user_id)
    return page_to_response(page, post_to_model)


async def get_all(db: AsyncSession) -> list[PostResponse]:
    posts = await PostRepository(db).get_all()
    return [post_to_model(p) for p in posts]


async def get_by_id(db: AsyncSession, post_id: int) -> PostResponse | None:
    post = await PostRepository(db).get_by_id(post_id)
    return post_to_model(post) if post else None


async def get_with_details(
    db: AsyncSession,
    post_id: int,
    current_user_id: int | None = None,
    base_url: str | None = None,
) -> PostDetail | None:
    """
    Return the detail view of *post_id*, including the caller's own
    reaction (``"Like"``, ``"Dislike"`` or ``"None"``) and an absolute
    author image URL.  Returns None when the post does not exist.
    """
    post = await PostRepository(db).get_with_details(post_id)
    if post is None:
        return None
    return post_to_detail(post, current_user_id, base_url)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def add(db: AsyncSession, data: PostCreate, user_id: int) -> PostDetail:
    if await UserRepository(db).get_by_id(user_id) is None:
        raise BadRequestError(f"User {user_id} does not exist.")
    await _ensure_category(db, data.category_id)

    repo = PostRepository(db)
    post = await repo.add(Post(**data.model_dump(), user_id=user_id))
    await cache.invalidate_posts()
    logger.info("Post %d created by user %d", post.id, user_id)

    created = await repo.get_with_details(post.id)
    return post_to_detail(created, user_id, None)


async def update(db: AsyncSession, post_id: int, data: PostCreate) -> None:
    repo = PostRepository(db)
    post = await repo.get_by_id(post_id)
    if post is None:
        raise NotFoundError(_NOT_FOUND)
    await _ensure_category(db, data.category_id)
    await repo.update(post, data.model_dump())
    await cache.invalidate_posts()


async def delete(db: AsyncSession, post_id: int) -> None:
    repo = PostRepository(db)
    post = await repo.get_by_id(post_id)
    if post is None:
        raise NotFoundError(_NOT_FOUND)
    await repo.delete(post)
    await cache.invalidate_posts()
    logger.info("Post %d deleted", post_id)


async def increment_views(db: AsyncSession, post_id: int) -> None:
    repo = PostRepository(db)
    post = await repo.get_by_id(post_id)
    if post is None:
        raise NotFoundError(_NOT_FOUND)
    post.views += 1
    await db.flush()
