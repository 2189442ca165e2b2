"""Item listings: create, search, status changes and soft delete."""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from app.models.item import Category, Item, ItemCondition, ItemImage, ItemStatus
from app.schemas.item import ItemCreate, ItemUpdate
from app.services import user_service

logger = structlog.get_logger(__name__)


class ItemSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    MOST_VIEWED = "most_viewed"


SORT_ORDER = {
    ItemSort.NEWEST: (Item.created_at.desc(), Item.id.desc()),
    ItemSort.OLDEST: (Item.created_at.asc(), Item.id.asc()),
    ItemSort.PRICE_ASC: (Item.price.asc(), Item.id.asc()),
    ItemSort.PRICE_DESC: (Item.price.desc(), Item.id.desc()),
    ItemSort.MOST_VIEWED: (Item.views.desc(), Item.id.desc()),
}


def _item_query():
    return select(Item).options(
        selectinload(Item.images),
        selectinload(Item.category),
    )


async def get_item(db: AsyncSession, item_id: int) -> Item:
    result = await db.execute(
        _item_query()
        .where(Item.id == item_id)
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise NotFoundError("Item not found")
    return item


async def get_owned_item(db: AsyncSession, item_id: int, user_id: int) -> Item:
    item = await get_item(db, item_id)
    if item.seller_id != user_id:
        raise PermissionDeniedError("Not authorized to modify this item")
    return item


async def view_item(db: AsyncSession, item_id: int) -> Item:
    """Fetch an item for display and count the view."""
    item = await get_item(db, item_id)
    item.views = (item.views or 0) + 1
    await db.commit()
    return item


async def search_items(
    db: AsyncSession,
    page: int,
    page_size: int,
    status: Optional[ItemStatus] = None,
    category_id: Optional[int] = None,
    condition: Optional[ItemCondition] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    location: Optional[str] = None,
    keyword: Optional[str] = None,
    sort: ItemSort = ItemSort.NEWEST,
) -> Tuple[List[Item], int]:
    """List items with filters, sorting and pagination."""
    query = _item_query().where(Item.status == (status or ItemStatus.AVAILABLE))

    if category_id:
        query = query.where(Item.category_id == category_id)

    if condition:
        query = query.where(Item.condition == condition)

    if min_price is not None:
        query = query.where(Item.price >= min_price)

    if max_price is not None:
        query = query.where(Item.price <= max_price)

    if location:
        query = query.where(Item.location.ilike(f"%{location}%"))

    if keyword:
        pattern = f"%{keyword}%"
        query = query.where(
            or_(
                Item.title.ilike(pattern),
                Item.description.ilike(pattern),
                Item.brand.ilike(pattern),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    query = query.order_by(*SORT_ORDER[sort])
    query = query.offset((page - 1) * page_size).limit(page_size)

    result = await db.execute(query)
    return list(result.scalars().all()), total


async def list_seller_items(
    db: AsyncSession, seller_id: int, status: Optional[ItemStatus] = None
) -> List[Item]:
    query = _item_query().where(Item.seller_id == seller_id)
    if status:
        query = query.where(Item.status == status)
    else:
        query = query.where(Item.status != ItemStatus.DELETED)
    result = await db.execute(query.order_by(Item.created_at.desc(), Item.id.desc()))
    return list(result.scalars().all())


async def similar_items(db: AsyncSession, item_id: int, limit: int = 10) -> List[Item]:
    item = await get_item(db, item_id)
    result = await db.execute(
        _item_query()
        .where(
            Item.category_id == item.category_id,
            Item.id != item.id,
            Item.status == ItemStatus.AVAILABLE,
        )
        .order_by(Item.created_at.desc(), Item.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def _active_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category or not category.is_active:
        raise NotFoundError("Category not found")
    return category


def _attach_images(db: AsyncSession, item_id: int, urls: List[str], start: int = 0) -> None:
    for idx, url in enumerate(urls, start=start):
        db.add(ItemImage(item_id=item_id, url=url, order=idx, is_primary=(idx == 0)))


async def create_item(db: AsyncSession, seller_id: int, data: ItemCreate) -> Item:
    await _active_category(db, data.category_id)

    item = Item(**data.model_dump(exclude={"image_urls"}), seller_id=seller_id)
    db.add(item)
    await db.flush()

    _attach_images(db, item.id, data.image_urls)
    await user_service.increment_profile_counters(db, seller_id, items_listed=1)
    await db.commit()

    logger.info("item_created", item_id=item.id, seller_id=seller_id)
    return await get_item(db, item.id)


async def update_item(db: AsyncSession, item_id: int, user_id: int, data: ItemUpdate) -> Item:
    item = await get_owned_item(db, item_id, user_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        await _active_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(item, field, value)

    await db.commit()
    return await get_item(db, item_id)


async def change_status(
    db: AsyncSession, item_id: int, user_id: int, status: ItemStatus
) -> Item:
    """Assign a new status. Marking SOLD stamps sold_at and credits the seller."""
    item = await get_owned_item(db, item_id, user_id)
    if item.status == ItemStatus.DELETED:
        raise InvalidStateError("Item has been deleted")

    previous = item.status
    item.status = status
    if status == ItemStatus.SOLD and previous != ItemStatus.SOLD:
        item.sold_at = datetime.utcnow()
        await user_service.increment_profile_counters(db, item.seller_id, items_sold=1)

    await db.commit()
    logger.info("item_status_changed", item_id=item_id, old=previous.value, new=status.value)
    return await get_item(db, item_id)


async def add_images(db: AsyncSession, item_id: int, user_id: int, urls: List[str]) -> Item:
    item = await get_owned_item(db, item_id, user_id)
    _attach_images(db, item.id, urls, start=len(item.images))
    await db.commit()
    return await get_item(db, item_id)


async def delete_item(db: AsyncSession, item_id: int, user_id: int) -> None:
    """Soft delete."""
    item = await get_owned_item(db, item_id, user_id)
    item.status = ItemStatus.DELETED
    await db.commit()
    logger.info("item_deleted", item_id=item_id)
