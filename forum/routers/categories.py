from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from forum.database import get_db
from forum.dependencies import PaginationParams, require_roles
from forum.schemas import CategoryCreate, CategoryResponse, PaginatedResponse
from forum.services import category_service

router = APIRouter(prefix="/api/categories", tags=["categories"])

staff_only = [Depends(require_roles("Admin", "Moderator"))]

@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await category_service.get_all(db)

@router.get("/paged", response_model=PaginatedResponse[CategoryResponse])
async def list_categories_paged(
    pagination: PaginationParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.get_paged(db, pagination.to_options())

@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await category_service.get_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found.")
    return category

@router.post("", status_code=201, response_model=CategoryResponse, dependencies=staff_only)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await category_service.add(db, data)

@router.put("/{category_id}", status_code=204, dependencies=staff_only)
async def update_category(category_id: int, data: CategoryCreate, db: AsyncSession = Depends(get_db)):
    await category_service.update(db, category_id, data)

@router.delete("/{category_id}", status_code=204, dependencies=staff_only)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await category_service.delete(db, category_id)
