"""
Post reactions.  A user has at most one row per post (composite primary
key); reacting again overwrites ``is_like`` on the existing row.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from forum.cache import cache
from forum.exceptions import BadRequestError, NotFoundError
from forum.models import PostLike
from forum.repositories import PostLikeRepository, PostRepository
from forum.schemas import PostLikeResponse


async def add(db: AsyncSession, post_id: int, user_id: int, is_like: bool) -> PostLikeResponse:
    if await PostRepository(db).get_by_id(post_id) is None:
        raise BadRequestError(f"Post {post_id} does not exist.")

    repo = PostLikeRepository(db)
    like = await repo.get(post_id, user_id)
    if like is not None:
        await repo.update(like, {"is_like": is_like})
    else:
        like = await repo.add(PostLike(post_id=post_id, user_id=user_id, is_like=is_like))

    await cache.invalidate_posts()
    return PostLikeResponse.model_validate(like)


async def get(db: AsyncSession, user_id: int, post_id: int) -> PostLikeResponse | None:
    like = await PostLikeRepository(db).get(post_id, user_id)
    return PostLikeResponse.model_validate(like) if like else None


async def delete(db: AsyncSession, user_id: int, post_id: int) -> None:
    repo = PostLikeRepository(db)
    like = await repo.get(post_id, user_id)
    if like is None:
        raise NotFoundError("Like not found.")
    await repo.delete(like)
    await cache.invalidate_posts()
