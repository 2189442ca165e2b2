"""Category hierarchy with soft delete."""
from typing import Dict, List, Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from app.models.item import Category
from app.schemas.item import CategoryCreate, CategoryUpdate

logger = structlog.get_logger(__name__)


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


async def list_categories(db: AsyncSession, include_inactive: bool = False) -> List[Category]:
    query = select(Category)
    if not include_inactive:
        query = query.where(Category.is_active.is_(True))
    result = await db.execute(query.order_by(Category.order, Category.name))
    return list(result.scalars().all())


async def get_children(db: AsyncSession, category_id: int) -> List[Category]:
    await get_category(db, category_id)
    result = await db.execute(
        select(Category)
        .where(Category.parent_id == category_id, Category.is_active.is_(True))
        .order_by(Category.order, Category.name)
    )
    return list(result.scalars().all())


async def search_categories(db: AsyncSession, name: str) -> List[Category]:
    result = await db.execute(
        select(Category)
        .where(Category.name.ilike(f"%{name}%"), Category.is_active.is_(True))
        .order_by(Category.name)
    )
    return list(result.scalars().all())


async def get_tree(db: AsyncSession) -> List[dict]:
    """
    Active categories nested under their parents.

    Children of an inactive parent are dropped together with it.
    """
    categories = await list_categories(db)
    nodes: Dict[int, dict] = {}
    for category in categories:
        nodes[category.id] = {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "parent_id": category.parent_id,
            "icon": category.icon,
            "order": category.order,
            "is_active": category.is_active,
            "children": [],
        }

    roots = []
    for category in categories:
        node = nodes[category.id]
        if category.parent_id is None:
            roots.append(node)
        elif category.parent_id in nodes:
            nodes[category.parent_id]["children"].append(node)
    return roots


async def _ensure_unique(
    db: AsyncSession, name: Optional[str], slug: Optional[str], exclude_id: Optional[int] = None
) -> None:
    conditions = []
    if name is not None:
        conditions.append(Category.name == name)
    if slug is not None:
        conditions.append(Category.slug == slug)
    if not conditions:
        return

    query = select(Category).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    if (await db.execute(query)).scalars().first():
        raise ConflictError("Category name or slug already exists")


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    await _ensure_unique(db, data.name, data.slug)
    if data.parent_id is not None:
        await get_category(db, data.parent_id)

    category = Category(**data.model_dump(), is_active=True)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    logger.info("category_created", category_id=category.id, slug=category.slug)
    return category


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
    category = await get_category(db, category_id)
    changes = data.model_dump(exclude_unset=True)

    await _ensure_unique(db, changes.get("name"), changes.get("slug"), exclude_id=category_id)
    parent_id = changes.get("parent_id")
    if parent_id is not None:
        if parent_id == category_id:
            raise InvalidStateError("A category cannot be its own parent")
        await get_category(db, parent_id)

    for field, value in changes.items():
        setattr(category, field, value)
    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: int) -> None:
    """Soft delete: the row stays, flagged inactive."""
    category = await get_category(db, category_id)
    category.is_active = False
    await db.commit()
    logger.info("category_deactivated", category_id=category_id)
