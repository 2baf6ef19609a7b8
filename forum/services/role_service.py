from sqlalchemy.ext.asyncio import AsyncSession

from forum.repositories import RoleRepository
from forum.schemas import RoleResponse


async def get_all(db: AsyncSession) -> list[RoleResponse]:
    roles = await RoleRepository(db).get_all()
    return [RoleResponse.model_validate(r) for r in roles]


async def get_by_id(db: AsyncSession, role_id: int) -> RoleResponse | None:
    role = await RoleRepository(db).get_by_id(role_id)
    return RoleResponse.model_validate(role) if role else None
