from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import PaginationParams, get_current_user, get_optional_user_id, require_roles
from forum.models import User
from forum.schemas import PaginatedResponse, PostCreate, PostDetail, PostResponse
from forum.services import post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])

staff_only = [Depends(require_roles("Admin", "Moderator"))]

@router.get("", response_model=PaginatedResponse[PostResponse])
async def list_posts(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_paged(db, pagination.to_options())

# Declared before "/{post_id}" so the literal segment wins.
@router.get("/user-posts", response_model=PaginatedResponse[PostResponse])
async def list_user_posts(
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_by_user(db, pagination.to_options(), user.id)

@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    request: Request,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_with_details(db, post_id, user_id, str(request.base_url))
    if not post:
        raise HTTPException(status_code=404, detail="Post not found.")
    return post

@router.post("", status_code=201, response_model=PostDetail)
async def create_post(
    data: PostCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.add(db, data, user.id)

@router.put("/{post_id}", status_code=204, dependencies=staff_only)
async def update_post(post_id: int, data: PostCreate, db: AsyncSession = Depends(get_db)):
    await post_service.update(db, post_id, data)

@router.delete("/{post_id}", status_code=204, dependencies=staff_only)
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db)):
    await post_service.delete(db, post_id)

@router.patch("/{post_id}/views", status_code=204)
async def increment_views(post_id: int, db: AsyncSession = Depends(get_db)):
    await post_service.increment_views(db, post_id)
