from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import get_current_user
from forum.models import User
from forum.schemas import CommentLikeCreate, CommentLikeResponse
from forum.services import comment_like_service

router = APIRouter(prefix="/api/comment-likes", tags=["likes"])

@router.get("/{comment_id}", response_model=CommentLikeResponse)
async def get_comment_like(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    like = await comment_like_service.get(db, user.id, comment_id)
    if not like:
        raise HTTPException(status_code=404, detail="Like not found.")
    return like

@router.post("", status_code=201, response_model=CommentLikeResponse)
async def add_comment_like(
    data: CommentLikeCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_like_service.add(db, data.comment_id, user.id)

@router.delete("/{comment_id}", status_code=204)
async def delete_comment_like(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_like_service.delete(db, user.id, comment_id)
