from sqlalchemy.ext.asyncio import AsyncSession

from forum.exceptions import BadRequestError, NotFoundError
from forum.models import CommentLike
from forum.repositories import CommentLikeRepository, CommentRepository
from forum.schemas import CommentLikeResponse


async def add(db: AsyncSession, comment_id: int, user_id: int) -> CommentLikeResponse:
    """Like *comment_id*; liking a comment twice keeps the single row."""
    if await CommentRepository(db).get_by_id(comment_id) is None:
        raise BadRequestError(f"Comment {comment_id} does not exist.")

    repo = CommentLikeRepository(db)
    like = await repo.get(comment_id, user_id)
    if like is None:
        like = await repo.add(CommentLike(comment_id=comment_id, user_id=user_id))
    return CommentLikeResponse.model_validate(like)


async def get(db: AsyncSession, user_id: int, comment_id: int) -> CommentLikeResponse | None:
    like = await CommentLikeRepository(db).get(comment_id, user_id)
    return CommentLikeResponse.model_validate(like) if like else None


async def delete(db: AsyncSession, user_id: int, comment_id: int) -> None:
    repo = CommentLikeRepository(db)
    like = await repo.get(comment_id, user_id)
    if like is None:
        raise NotFoundError("Like not found.")
    await repo.delete(like)
