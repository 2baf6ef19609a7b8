from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from forum.models import Post, User
from forum.pagination import Page, QueryOptions, SearchFields, paginate
from forum.repositories.base import BaseRepository

POST_SEARCH_FIELDS = SearchFields(
    Post,
    "title",
    "content",
    "category.name",
    "user.first_name",
    "user.last_name",
    category_column=Post.category_id,
)


def _details_query():
    """
    SELECT for the list and detail views, with everything the counters need.

    ``populate_existing`` refreshes instances already in the session so
    counters never come from a stale identity map.
    """
    return select(Post).execution_options(populate_existing=True).options(
        selectinload(Post.likes),
        selectinload(Post.comments),
        selectinload(Post.user).selectinload(User.role),
        selectinload(Post.category),
    )


class PostRepository(BaseRepository[Post]):
    model = Post

    async def get_paged(self, options: QueryOptions) -> Page[Post]:
        q = _details_query().order_by(Post.id.desc())
        return await paginate(self.db, q, options, POST_SEARCH_FIELDS)

    async def get_by_user_paged(self, options: QueryOptions, user_id: int) -> Page[Post]:
        q = (
            _details_query()
            .where(Post.user_id == user_id)
            .order_by(Post.posted_date.desc(), Post.id.desc())
        )
        return await paginate(self.db, q, options, POST_SEARCH_FIELDS)

    async def get_with_details(self, post_id: int) -> Optional[Post]:
        q = _details_query().where(Post.id == post_id)
        result = await self.db.execute(q)
        return result.scalar_one_or_none()
