"""Database models."""
from app.models.user import User, UserProfile
from app.models.item import Item, ItemImage, Category
from app.models.offer import Offer
from app.models.transaction import Transaction
from app.models.message import Message

__all__ = [
    "User",
    "UserProfile",
    "Item",
    "ItemImage",
    "Category",
    "Offer",
    "Transaction",
    "Message",
]
