from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from forum.models import Comment
from forum.repositories.base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    model = Comment

    async def get_by_id_with_user(self, comment_id: int) -> Optional[Comment]:
        q = (
            select(Comment)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
            .options(selectinload(Comment.user), selectinload(Comment.likes))
        )
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def get_by_post_id(self, post_id: int) -> Sequence[Comment]:
        """
        Return every comment of *post_id* (top-level and replies), newest
        first, with author and likes loaded.  The caller assembles the
        reply tree.
        """
        q = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .execution_options(populate_existing=True)
            .options(selectinload(Comment.user), selectinload(Comment.likes))
            .order_by(Comment.comment_date.desc(), Comment.id.desc())
        )
        result = await self.db.execute(q)
        return result.scalars().all()
