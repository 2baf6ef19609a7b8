"""
Generic paging and filtering over SQLAlchemy ``Select`` statements.

Listing endpoints (categories, posts, users) all share the same contract::

    page = await paginate(db, select(Post).order_by(Post.id.desc()), options, POST_FIELDS)

Filtering and counting are pushed to the database: the caller hands over an
ordered, not-yet-executed statement, and only the requested slice is
materialised.

Searchable fields are declared per entity with :class:`SearchFields` instead
of being looked up by reflection on every request.  The registry resolves each
field path to a column expression once, when the module defining it is
imported, so a typo in a path fails at startup rather than on the first
request that uses it.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, String, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.exceptions import InvalidSearchFieldError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def normalize_field_name(name: str) -> str:
    """Return *name* in dotted snake_case: ``"Category.Name"`` -> ``"category.name"``."""
    return ".".join(
        _WORD_BOUNDARY_RE.sub("_", part.strip()).lower() for part in name.strip().split(".")
    )


# ---------------------------------------------------------------------------
# Options / result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QueryOptions:
    """What page to return and how to filter before slicing."""

    current_page: int = 1
    page_size: int = 5
    search_property_name: str | None = None
    search_term: str | None = None
    category_id: int | None = None

    @property
    def has_search(self) -> bool:
        return bool(self.search_property_name) and bool(self.search_term)

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    def clamped(self) -> QueryOptions:
        """Copy with ``current_page`` and ``page_size`` raised to at least 1."""
        return replace(
            self,
            current_page=max(self.current_page, 1),
            page_size=max(self.page_size, 1),
        )


@dataclass
class Page(Generic[T]):
    """One slice of a result set plus the counts needed to render a pager."""

    items: list[T]
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    search_term: str | None = None

    def map(self, transform) -> Page[Any]:
        """Return a page with the same metadata and ``transform`` applied to each item."""
        return Page(
            items=[transform(item) for item in self.items],
            current_page=self.current_page,
            page_size=self.page_size,
            total_items=self.total_items,
            total_pages=self.total_pages,
            search_term=self.search_term,
        )


# ---------------------------------------------------------------------------
# Searchable field registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _SearchField:
    column: Any
    join: Any = None


class SearchFields:
    """
    Registry of the string fields of *model* that listing endpoints may search.

    Each path is either a column of *model* (``"title"``) or a column of a
    many-to-one relationship target (``"category.name"``).  Paths are
    normalised with :func:`normalize_field_name`, so callers may also use
    ``"Title"`` or ``"Category.Name"``.

    ``category_column`` is the column compared against
    ``QueryOptions.category_id``; entities without one reject category
    filtering.
    """

    def __init__(self, model: type, *paths: str, category_column: Any = None) -> None:
        self.model = model
        self.paths = tuple(normalize_field_name(p) for p in paths)
        self.category_column = category_column
        self._fields = {path: self._resolve(path) for path in self.paths}

    @property
    def names(self) -> list[str]:
        return list(self._fields)

    def _resolve(self, path: str) -> _SearchField:
        segments = path.split(".")
        if len(segments) > 2:
            raise InvalidSearchFieldError(
                f"'{path}': only one level of relationship navigation is supported."
            )

        target = self.model
        join = None
        if len(segments) == 2:
            relationships = inspect(self.model).relationships
            if segments[0] not in relationships or relationships[segments[0]].uselist:
                raise InvalidSearchFieldError(
                    f"'{segments[0]}' is not a many-to-one relationship of {self.model.__name__}."
                )
            join = getattr(self.model, segments[0])
            target = relationships[segments[0]].mapper.class_

        column_attrs = inspect(target).column_attrs
        if segments[-1] not in column_attrs:
            raise InvalidSearchFieldError(f"'{path}' is not a column of {self.model.__name__}.")
        if not isinstance(column_attrs[segments[-1]].columns[0].type, String):
            raise InvalidSearchFieldError(f"'{path}' is not a text column and cannot be searched.")

        return _SearchField(column=getattr(target, segments[-1]), join=join)

    def get(self, name: str) -> _SearchField:
        try:
            return self._fields[normalize_field_name(name)]
        except KeyError:
            raise InvalidSearchFieldError(
                f"'{name}' is not a searchable property of {self.model.__name__}. "
                f"Searchable properties: {', '.join(self.names)}."
            ) from None

    def apply(self, statement: Select, options: QueryOptions) -> Select:
        """Add the WHERE clauses requested by *options* to *statement*."""
        if options.has_search:
            search_field = self.get(options.search_property_name)
            if search_field.join is not None:
                statement = statement.join(search_field.join)
            statement = statement.where(
                search_field.column.contains(options.search_term, autoescape=True)
            )

        if options.category_id is not None:
            if self.category_column is None:
                raise InvalidSearchFieldError(
                    f"{self.model.__name__} cannot be filtered by category."
                )
            python_type = self.category_column.property.columns[0].type.python_type
            statement = statement.where(self.category_column == python_type(options.category_id))

        return statement


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def paginate(
    db: AsyncSession,
    statement: Select,
    options: QueryOptions,
    fields: SearchFields,
) -> Page:
    """
    Execute *statement* as one page described by *options*.

    *statement* must already carry its ORDER BY; the page keeps that order.
    Two SQL statements are issued: a ``COUNT(*)`` over the filtered
    statement, then the statement itself with ``OFFSET``/``LIMIT``.

    ``page_size`` and ``current_page`` below 1 are treated as 1.  Asking for
    a page past the last one returns an empty page.
    """
    options = options.clamped()
    statement = fields.apply(statement, options)

    count_q = select(func.count()).select_from(statement.order_by(None).subquery())
    total_items: int = (await db.execute(count_q)).scalar_one()
    total_pages = math.ceil(total_items / options.page_size)

    result = await db.execute(statement.offset(options.offset).limit(options.page_size))
    items = list(result.scalars().all())

    logger.debug(
        "Paged %s: page=%d size=%d total=%d",
        fields.model.__name__,
        options.current_page,
        options.page_size,
        total_items,
    )
    return Page(
        items=items,
        current_page=options.current_page,
        page_size=options.page_size,
        total_items=total_items,
        total_pages=total_pages,
        search_term=options.search_term if options.has_search else None,
    )
