"""Item catalog models."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean,
    DateTime, ForeignKey, Enum as SQLEnum, Index
)
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class ItemStatus(str, enum.Enum):
    """Item status."""
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    DELETED = "deleted"


class ItemCondition(str, enum.Enum):
    """Item condition."""
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Category(Base):
    """Item category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    icon = Column(String(100))
    order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")
    items = relationship("Item", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name}>"


class Item(Base):
    """A listing put up for sale by a seller."""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text)
    price = Column(Float, nullable=False)

    # Details
    condition = Column(SQLEnum(ItemCondition), default=ItemCondition.GOOD)
    brand = Column(String(100))
    model = Column(String(100))
    year_of_purchase = Column(Integer)
    original_receipt = Column(String(500))  # receipt image URL
    status = Column(SQLEnum(ItemStatus), default=ItemStatus.AVAILABLE, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    location = Column(String(200))

    # Engagement
    views = Column(Integer, default=0)
    is_negotiable = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    sold_at = Column(DateTime)

    # Relationships
    seller = relationship("User", back_populates="items")
    category = relationship("Category", back_populates="items")
    images = relationship(
        "ItemImage",
        back_populates="item",
        cascade="all, delete-orphan",
        order_by="ItemImage.order",
    )
    offers = relationship("Offer", back_populates="item")
    transactions = relationship("Transaction", back_populates="item")

    # Indexes for common queries
    __table_args__ = (
        Index('idx_item_status_created', 'status', 'created_at'),
        Index('idx_item_category_status', 'category_id', 'status'),
        Index('idx_item_seller_status', 'seller_id', 'status'),
    )

    def __repr__(self):
        return f"<Item {self.title}>"


class ItemImage(Base):
    """Item image model."""

    __tablename__ = "item_images"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    order = Column(Integer, default=0)
    is_primary = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    item = relationship("Item", back_populates="images")

    def __repr__(self):
        return f"<ItemImage {self.id}>"
