from typing import Optional

from sqlalchemy import select

from forum.models import Role
from forum.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    model = Role

    async def find_by_name(self, name: str) -> Optional[Role]:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()
