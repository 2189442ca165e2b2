"""Pydantic schemas for API validation."""
from app.schemas.user import (
    UserCreate, UserUpdate, UserResponse, UserLogin, Token,
    ProfileResponse, ProfileUpdate
)
from app.schemas.item import (
    ItemCreate, ItemUpdate, ItemResponse, ItemList,
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryTree
)
from app.schemas.offer import OfferCreate, OfferResponse
from app.schemas.transaction import TransactionCreate, TransactionResponse
from app.schemas.message import MessageCreate, MessageResponse
from app.schemas.image import ImageSearchResult

__all__ = [
    "UserCreate", "UserUpdate", "UserResponse", "UserLogin", "Token",
    "ProfileResponse", "ProfileUpdate",
    "ItemCreate", "ItemUpdate", "ItemResponse", "ItemList",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse", "CategoryTree",
    "OfferCreate", "OfferResponse",
    "TransactionCreate", "TransactionResponse",
    "MessageCreate", "MessageResponse",
    "ImageSearchResult",
]
