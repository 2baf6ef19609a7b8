from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import get_current_user, require_roles
from forum.models import User
from forum.schemas import CommentCreate, CommentUpdate, CommentWithUser
from forum.services import comment_service

router = APIRouter(prefix="/api/comments", tags=["comments"])

staff_only = [Depends(require_roles("Admin", "Moderator"))]

@router.get("/posts/{post_id}/comments", response_model=list[CommentWithUser])
async def list_post_comments(post_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    comments = await comment_service.get_by_post_id_with_user(db, post_id, str(request.base_url))
    if comments is None:
        raise HTTPException(status_code=404, detail="Post not found.")
    return comments

@router.get("/{comment_id}", response_model=CommentWithUser)
async def get_comment(comment_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    comment = await comment_service.get_by_id_with_user(db, comment_id, str(request.base_url))
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found.")
    return comment

@router.post("", status_code=201, response_model=CommentWithUser)
async def create_comment(
    data: CommentCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.add(db, data, user.id, str(request.base_url))

@router.put("/{comment_id}", status_code=204, dependencies=staff_only)
async def update_comment(comment_id: int, data: CommentUpdate, db: AsyncSession = Depends(get_db)):
    await comment_service.update(db, comment_id, data)

@router.delete("/{comment_id}", status_code=204, dependencies=staff_only)
async def delete_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    await comment_service.delete(db, comment_id)
