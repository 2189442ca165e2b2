"""Category endpoints."""
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_admin
from app.models.user import User
from app.schemas.item import CategoryCreate, CategoryResponse, CategoryTree, CategoryUpdate
from app.services import category_service

router = APIRouter()


@router.get("/", response_model=List[CategoryResponse])
async def list_categories(
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
):
    return await category_service.list_categories(db, include_inactive)


@router.get("/tree", response_model=List[CategoryTree])
async def category_tree(db: AsyncSession = Depends(get_db)):
    """Active categories nested by parent."""
    return await category_service.get_tree(db)


@router.get("/search", response_model=List[CategoryResponse])
async def search_categories(
    name: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.search_categories(db, name)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await category_service.get_category(db, category_id)


@router.get("/{category_id}/children", response_model=List[CategoryResponse])
async def get_children(
    category_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await category_service.get_children(db, category_id)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.create_category(db, category_data)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await category_service.update_category(db, category_id, category_data)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate a category (soft delete)."""
    await category_service.delete_category(db, category_id)
