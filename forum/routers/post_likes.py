from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import get_current_user
from forum.models import User
from forum.schemas import PostLikeCreate, PostLikeResponse
from forum.services import post_like_service

router = APIRouter(prefix="/api/post-likes", tags=["likes"])

@router.get("/{post_id}", response_model=PostLikeResponse)
async def get_post_like(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    like = await post_like_service.get(db, user.id, post_id)
    if not like:
        raise HTTPException(status_code=404, detail="Like not found.")
    return like

@router.post("", status_code=201, response_model=PostLikeResponse)
async def add_post_like(
    data: PostLikeCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_like_service.add(db, data.post_id, user.id, data.is_like)

@router.delete("/{post_id}", status_code=204)
async def delete_post_like(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_like_service.delete(db, user.id, post_id)
