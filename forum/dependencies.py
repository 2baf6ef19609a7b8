import logging
from typing import Callable, Optional

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from forum.config import settings
from forum.database import get_db
from forum.exceptions import AuthenticationError, PermissionDeniedError
from forum.models import User
from forum.pagination import QueryOptions
from forum.repositories import UserRepository
from forum.security import decode_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


class PaginationParams:
    """
    Reusable FastAPI dependency that parses paging and search query
    parameters.

    Usage in a router::

        @router.get("/posts")
        async def list_posts(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    per_page:
        Number of items per page, capped at ``settings.MAX_PAGE_SIZE``.
    search_property_name / search_term:
        Optional substring search on one of the entity's declared search
        fields.  The field name is validated by the pagination helper.
    category_id:
        Optional exact-match filter; ``0`` means "no filter".
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="Page number (1-based)."),
        per_page: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=settings.MAX_PAGE_SIZE,
            description="Number of items returned per page.",
        ),
        search_property_name: Optional[str] = Query(
            None, description="Field to search, e.g. 'title' or 'Category.Name'."
        ),
        search_term: Optional[str] = Query(None, description="Substring to look for."),
        category_id: int = Query(0, ge=0, description="Category filter; 0 disables it."),
    ) -> None:
        self.page = page
        self.per_page = min(per_page, settings.MAX_PAGE_SIZE)
        self.search_property_name = search_property_name
        self.search_term = search_term
        self.category_id = category_id or None

    def to_options(self) -> QueryOptions:
        return QueryOptions(
            current_page=self.page,
            page_size=self.per_page,
            search_property_name=self.search_property_name,
            search_term=self.search_term,
            category_id=self.category_id,
        )


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def _user_id_from_token(token: str) -> int:
    payload = decode_token(token)
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError) as e:
        raise AuthenticationError() from e


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user (with role loaded) or fail with 401."""
    user = await UserRepository(db).get_by_id(_user_id_from_token(token))
    if user is None:
        logger.warning("Token refers to a user that no longer exists")
        raise AuthenticationError()
    return user


async def get_optional_user_id(
    token: Optional[str] = Depends(oauth2_scheme_optional),
) -> Optional[int]:
    """Return the caller's id when a valid token is sent, otherwise None."""
    if not token:
        return None
    try:
        return _user_id_from_token(token)
    except AuthenticationError:
        return None


def require_roles(*role_names: str) -> Callable:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage::

        @router.delete("/{id}", dependencies=[Depends(require_roles("Admin"))])
    """

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role is None or user.role.name not in role_names:
            raise PermissionDeniedError()
        return user

    return checker
