from sqlalchemy import select

from forum.models import Category
from forum.pagination import Page, QueryOptions, SearchFields, paginate
from forum.repositories.base import BaseRepository

CATEGORY_SEARCH_FIELDS = SearchFields(Category, "name", "description")


class CategoryRepository(BaseRepository[Category]):
    model = Category

    async def get_paged(self, options: QueryOptions) -> Page[Category]:
        q = select(Category).order_by(Category.id.desc())
        return await paginate(self.db, q, options, CATEGORY_SEARCH_FIELDS)
