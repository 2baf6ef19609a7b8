"""
Category service — CRUD and paged listing for categories.

Categories change rarely and are read on every page of the front end, so
both the full list and the paged listings go through the Redis cache and
are invalidated on any write.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from forum.cache import cache, listing_key
from forum.config import settings
from forum.exceptions import ConflictError, NotFoundError
from forum.mapping import page_to_response
from forum.models import Category
from forum.pagination import QueryOptions
from forum.repositories import CategoryRepository
from forum.schemas import CategoryCreate, CategoryResponse, PaginatedResponse

_NOT_FOUND = "Category not found."


async def get_all(db: AsyncSession) -> list[CategoryResponse]:
    cache_key = "categories:all"
    cached = await cache.get(cache_key)
    if cached is not None:
        return [CategoryResponse(**item) for item in cached]

    categories = await CategoryRepository(db).get_all()
    result = [CategoryResponse.model_validate(c) for c in categories]
    await cache.set(cache_key, [c.model_dump() for c in result], ttl=settings.CACHE_TTL_LIST)
    return result


async def get_by_id(db: AsyncSession, category_id: int) -> CategoryResponse | None:
    category = await CategoryRepository(db).get_by_id(category_id)
    return CategoryResponse.model_validate(category) if category else None


async def get_paged(db: AsyncSession, options: QueryOptions) -> PaginatedResponse[CategoryResponse]:
    cache_key = listing_key("categories", options)
    cached = await cache.get(cache_key)
    if cached is not None:
        return PaginatedResponse[CategoryResponse](**cached)

    page = await CategoryRepository(db).get_paged(options)
    response = page_to_response(page, CategoryResponse.model_validate)
    await cache.set(cache_key, response.model_dump(mode="json"), ttl=settings.CACHE_TTL_LIST)
    return response


async def add(db: AsyncSession, data: CategoryCreate) -> CategoryResponse:
    category = await CategoryRepository(db).add(Category(**data.model_dump()))
    await cache.invalidate_categories()
    return CategoryResponse.model_validate(category)


async def update(db: AsyncSession, category_id: int, data: CategoryCreate) -> CategoryResponse:
    repo = CategoryRepository(db)
    category = await repo.get_by_id(category_id)
    if category is None:
        raise NotFoundError(_NOT_FOUND)
    await repo.update(category, data.model_dump())
    await cache.invalidate_categories()
    await cache.invalidate_posts()  # listings carry category names
    return CategoryResponse.model_validate(category)


async def delete(db: AsyncSession, category_id: int) -> None:
    repo = CategoryRepository(db)
    category = await repo.get_by_id(category_id)
    if category is None:
        raise NotFoundError(_NOT_FOUND)
    try:
        await repo.delete(category)
    except IntegrityError as exc:
        raise ConflictError("Category still has posts.") from exc
    await cache.invalidate_categories()
