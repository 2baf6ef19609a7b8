from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import get_current_user
from forum.mapping import user_to_model
from forum.models import User
from forum.schemas import RefreshTokenRequest, TokenResponse, UserLogin, UserResponse
from forum.services import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/token", response_model=TokenResponse)
async def login(data: UserLogin, db: AsyncSession = Depends(get_db)):
    return await user_service.login(db, data)

@router.put("/token", response_model=TokenResponse)
async def refresh(data: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    return await user_service.refresh(db, data.refresh_token)

@router.delete("/token", status_code=204)
async def logout(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.logout(db, user.id)

@router.get("/me", response_model=UserResponse)
async def me(request: Request, user: User = Depends(get_current_user)):
    return user_to_model(user, str(request.base_url))
