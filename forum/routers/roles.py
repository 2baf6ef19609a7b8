from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.schemas import RoleResponse
from forum.services import role_service

router = APIRouter(prefix="/api/roles", tags=["roles"])

@router.get("", response_model=list[RoleResponse])
async def list_roles(db: AsyncSession = Depends(get_db)):
    return await role_service.get_all(db)
