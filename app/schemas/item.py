"""Item and category schemas."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_validator

from app.models.item import ItemCondition, ItemStatus


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    parent_id: Optional[int] = None
    icon: Optional[str] = Field(None, max_length=100)
    order: int = 0


class CategoryCreate(CategoryBase):
    """Schema for creating a category."""


class CategoryUpdate(BaseModel):
    """Schema for updating a category."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    parent_id: Optional[int] = None
    icon: Optional[str] = Field(None, max_length=100)
    order: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator("name", "slug", "order", "is_active")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class CategoryResponse(BaseModel):
    """Schema for category response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    icon: Optional[str] = None
    order: int
    is_active: bool


class CategoryTree(CategoryResponse):
    """Category with its active descendants."""
    children: List["CategoryTree"] = []


class ItemImageResponse(BaseModel):
    """Schema for item image response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    order: int
    is_primary: bool


class ItemBase(BaseModel):
    """Base item schema."""
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    condition: ItemCondition = ItemCondition.GOOD
    category_id: int
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year_of_purchase: Optional[int] = Field(None, ge=1900, le=2100)
    original_receipt: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    is_negotiable: bool = True


class ItemCreate(ItemBase):
    """Schema for creating an item."""
    image_urls: List[str] = []


class ItemUpdate(BaseModel):
    """Schema for updating an item."""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    condition: Optional[ItemCondition] = None
    category_id: Optional[int] = None
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year_of_purchase: Optional[int] = Field(None, ge=1900, le=2100)
    original_receipt: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    is_negotiable: Optional[bool] = None

    @field_validator("title", "price", "condition", "category_id", "is_negotiable")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ItemStatusUpdate(BaseModel):
    status: ItemStatus


class ItemResponse(ItemBase):
    """Schema for item response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: ItemStatus
    seller_id: int
    views: int
    created_at: datetime
    updated_at: datetime
    sold_at: Optional[datetime] = None
    images: List[ItemImageResponse] = []
    category: CategoryResponse


class ItemList(BaseModel):
    """Schema for item list response."""
    items: List[ItemResponse]
    total: int
    page: int
    page_size: int
    pages: int
