"""Repositories for the composite-key like tables."""

from typing import Optional

from forum.models import CommentLike, PostLike
from forum.repositories.base import BaseRepository


class PostLikeRepository(BaseRepository[PostLike]):
    model = PostLike

    async def get(self, post_id: int, user_id: int) -> Optional[PostLike]:
        return await self.db.get(PostLike, (post_id, user_id))


class CommentLikeRepository(BaseRepository[CommentLike]):
    model = CommentLike

    async def get(self, comment_id: int, user_id: int) -> Optional[CommentLike]:
        return await self.db.get(CommentLike, (comment_id, user_id))
