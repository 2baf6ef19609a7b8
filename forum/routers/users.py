from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import PaginationParams, get_current_user, require_roles
from forum.models import User
from forum.schemas import MessageResponse, PaginatedResponse, UpdateUserRole, UserRegister, UserResponse
from forum.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])

admin_only = [Depends(require_roles("Admin"))]

@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await user_service.get_all(db)

@router.get("/paged", response_model=PaginatedResponse[UserResponse])
async def list_users_paged(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_paged(db, pagination.to_options())

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_by_id(db, user_id, str(request.base_url))
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user

@router.post("", status_code=201, response_model=MessageResponse)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)):
    if not await user_service.register(db, data):
        raise HTTPException(status_code=409, detail="A user with this email already exists.")
    return MessageResponse(message="Registration successful.")

@router.put("", response_model=UserResponse)
async def update_profile(
    first_name: str = Form(..., min_length=1, max_length=100),
    last_name: str = Form(..., min_length=1, max_length=100),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update(db, user.id, first_name, last_name, file)

@router.patch("/{user_id}", status_code=204, dependencies=admin_only)
async def update_role(user_id: int, data: UpdateUserRole, db: AsyncSession = Depends(get_db)):
    await user_service.update_role(db, user_id, data.role_id)

@router.delete("/{user_id}", status_code=204, dependencies=admin_only)
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)):
    await user_service.delete(db, user_id)
