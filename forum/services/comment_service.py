"""
Comment service — threaded comments on posts.

A reply must point at a comment of the same post; both the post and the
parent are checked before the INSERT.  Every write invalidates the cached
post listings, which carry a comment counter.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from forum.cache import cache
from forum.exceptions import BadRequestError, NotFoundError
from forum.mapping import comment_to_model_with_user, comments_to_tree
from forum.models import Comment
from forum.repositories import CommentRepository, PostRepository
from forum.schemas import CommentCreate, CommentUpdate, CommentWithUser

_NOT_FOUND = "Comment not found."


async def get_by_id_with_user(
    db: AsyncSession, comment_id: int, base_url: str | None = None
) -> CommentWithUser | None:
    comment = await CommentRepository(db).get_by_id_with_user(comment_id)
    return comment_to_model_with_user(comment, base_url) if comment else None


async def get_by_post_id_with_user(
    db: AsyncSession, post_id: int, base_url: str | None = None
) -> list[CommentWithUser] | None:
    """
    Return the top-level comments of *post_id*, newest first, each with its
    nested replies.  Returns None when the post does not exist.
    """
    if await PostRepository(db).get_by_id(post_id) is None:
        return None
    comments = await CommentRepository(db).get_by_post_id(post_id)
    return comments_to_tree(comments, base_url)


async def add(
    db: AsyncSession, data: CommentCreate, user_id: int, base_url: str | None = None
) -> CommentWithUser:
    if await PostRepository(db).get_by_id(data.post_id) is None:
        raise BadRequestError(f"Post {data.post_id} does not exist.")

    repo = CommentRepository(db)
    if data.parent_comment_id is not None:
        parent = await repo.get_by_id(data.parent_comment_id)
        if parent is None:
            raise BadRequestError(f"Parent comment {data.parent_comment_id} does not exist.")
        if parent.post_id != data.post_id:
            raise BadRequestError("A reply must belong to the same post as its parent comment.")

    comment = await repo.add(Comment(**data.model_dump(), user_id=user_id))
    await cache.invalidate_posts()

    created = await repo.get_by_id_with_user(comment.id)
    return comment_to_model_with_user(created, base_url)


async def update(db: AsyncSession, comment_id: int, data: CommentUpdate) -> None:
    repo = CommentRepository(db)
    comment = await repo.get_by_id(comment_id)
    if comment is None:
        raise NotFoundError(_NOT_FOUND)
    await repo.update(comment, data.model_dump())


async def delete(db: AsyncSession, comment_id: int) -> None:
    repo = CommentRepository(db)
    comment = await repo.get_by_id(comment_id)
    if comment is None:
        raise NotFoundError(_NOT_FOUND)
    await repo.delete(comment)
    await cache.invalidate_posts()
