"""Item endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_current_user_id
from app.models.item import ItemCondition, ItemStatus
from app.schemas.item import ItemCreate, ItemList, ItemResponse, ItemStatusUpdate, ItemUpdate
from app.services import file_upload, item_service
from app.services.item_service import ItemSort

router = APIRouter()


@router.get("/", response_model=ItemList)
async def list_items(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[ItemStatus] = None,
    category_id: Optional[int] = None,
    condition: Optional[ItemCondition] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    location: Optional[str] = None,
    keyword: Optional[str] = None,
    sort: ItemSort = ItemSort.NEWEST,
    db: AsyncSession = Depends(get_db),
):
    """List items with pagination, filters and sorting."""
    items, total = await item_service.search_items(
        db,
        page,
        page_size,
        status=status,
        category_id=category_id,
        condition=condition,
        min_price=min_price,
        max_price=max_price,
        location=location,
        keyword=keyword,
        sort=sort,
    )

    return ItemList(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size,
    )


@router.get("/seller/{seller_id}", response_model=List[ItemResponse])
async def list_seller_items(
    seller_id: int,
    status: Optional[ItemStatus] = None,
    db: AsyncSession = Depends(get_db),
):
    return await item_service.list_seller_items(db, seller_id, status)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get item by ID and count the view."""
    return await item_service.view_item(db, item_id)


@router.get("/{item_id}/similar", response_model=List[ItemResponse])
async def similar_items(
    item_id: int,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.similar_items(db, item_id, limit)


@router.post("/", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    item_data: ItemCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a new listing."""
    return await item_service.create_item(db, user_id, item_data)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    item_data: ItemUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.update_item(db, item_id, user_id, item_data)


@router.put("/{item_id}/status", response_model=ItemResponse)
async def update_item_status(
    item_id: int,
    status_data: ItemStatusUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await item_service.change_status(db, item_id, user_id, status_data.status)


@router.post("/{item_id}/images", response_model=ItemResponse)
async def upload_item_images(
    item_id: int,
    files: List[UploadFile] = File(...),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Upload image files and append them to the item's gallery."""
    await item_service.get_owned_item(db, item_id, user_id)
    urls = await file_upload.save_images(files)
    return await item_service.add_images(db, item_id, user_id, urls)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete an item (soft delete)."""
    await item_service.delete_item(db, item_id, user_id)
