from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.orm import selectinload

from forum.models import User
from forum.pagination import Page, QueryOptions, SearchFields, paginate
from forum.repositories.base import BaseRepository

USER_SEARCH_FIELDS = SearchFields(User, "first_name", "last_name", "email", "role.name")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_id(self, id: int) -> Optional[User]:
        q = (
            select(User)
            .where(User.id == id)
            .execution_options(populate_existing=True)
            .options(selectinload(User.role))
        )
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def get_all(self):
        q = (
            select(User)
            .execution_options(populate_existing=True)
            .options(selectinload(User.role))
            .order_by(User.id)
        )
        result = await self.db.execute(q)
        return result.scalars().all()

    async def get_by_email(self, email: str) -> Optional[User]:
        q = (
            select(User)
            .where(User.email == email)
            .execution_options(populate_existing=True)
            .options(selectinload(User.role))
        )
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        result = await self.db.execute(select(exists().where(User.email == email)))
        return bool(result.scalar())

    async def get_salt(self, email: str) -> Optional[str]:
        result = await self.db.execute(select(User.salt).where(User.email == email))
        return result.scalar_one_or_none()

    async def verify(self, email: str, hashed_password: str) -> bool:
        q = select(exists().where(User.email == email, User.hashed_password == hashed_password))
        result = await self.db.execute(q)
        return bool(result.scalar())

    # ----- Refresh tokens -----
    async def store_refresh_token(self, user_id: int, token: str, expiry: datetime) -> None:
        user = await self.db.get(User, user_id)
        if user is not None:
            user.refresh_token = token
            user.refresh_token_expiry_date = expiry
            await self.db.flush()

    async def delete_refresh_token(self, user_id: int) -> None:
        user = await self.db.get(User, user_id)
        if user is not None:
            user.refresh_token = None
            user.refresh_token_expiry_date = None
            await self.db.flush()

    async def is_refresh_token_valid(self, user_id: int, token: str) -> bool:
        user = await self.db.get(User, user_id)
        if user is None or user.refresh_token != token or user.refresh_token_expiry_date is None:
            return False
        return _as_utc(user.refresh_token_expiry_date) > datetime.now(timezone.utc)

    async def get_by_refresh_token(self, token: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.refresh_token == token))
        return result.scalar_one_or_none()

    async def get_paged(self, options: QueryOptions) -> Page[User]:
        q = (
            select(User)
            .execution_options(populate_existing=True)
            .options(selectinload(User.role))
            .order_by(User.id.desc())
        )
        return await paginate(self.db, q, options, USER_SEARCH_FIELDS)
