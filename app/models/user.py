"""User and profile models."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class UserRole(str, enum.Enum):
    """User roles."""
    ADMIN = "admin"
    USER = "user"
    MODERATOR = "moderator"


class ContactMethod(str, enum.Enum):
    """Preferred way to be contacted by other users."""
    PHONE = "phone"
    EMAIL = "email"
    IN_APP = "in_app"


class User(Base):
    """User model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    phone = Column(String(20))

    # Location
    province = Column(String(100), index=True)
    district = Column(String(100))
    address = Column(String(255))

    # Status
    is_active = Column(Boolean, default=True)
    is_verified = Column(Boolean, default=False)
    role = Column(SQLEnum(UserRole), default=UserRole.USER)

    # Shared by email verification and password reset
    verification_token = Column(String(64), index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime)

    # Relationships
    profile = relationship(
        "UserProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    items = relationship("Item", back_populates="seller", cascade="all, delete-orphan")
    offers_made = relationship(
        "Offer",
        foreign_keys="Offer.buyer_id",
        back_populates="buyer"
    )
    offers_received = relationship(
        "Offer",
        foreign_keys="Offer.seller_id",
        back_populates="seller"
    )
    transactions_as_buyer = relationship(
        "Transaction",
        foreign_keys="Transaction.buyer_id",
        back_populates="buyer"
    )
    transactions_as_seller = relationship(
        "Transaction",
        foreign_keys="Transaction.seller_id",
        back_populates="seller"
    )
    messages_sent = relationship(
        "Message",
        foreign_keys="Message.sender_id",
        back_populates="sender"
    )
    messages_received = relationship(
        "Message",
        foreign_keys="Message.receiver_id",
        back_populates="receiver"
    )

    def __repr__(self):
        return f"<User {self.username}>"


class UserProfile(Base):
    """Profile details and activity counters, one per user."""

    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    profile_picture_url = Column(String(500))
    bio = Column(Text)
    preferred_contact_method = Column(SQLEnum(ContactMethod), default=ContactMethod.IN_APP)

    # Activity statistics
    items_listed = Column(Integer, default=0)
    items_sold = Column(Integer, default=0)
    items_purchased = Column(Integer, default=0)
    total_transactions = Column(Integer, default=0)
    last_active_at = Column(DateTime)

    # Preferences
    preferred_language = Column(String(10), default="en")
    timezone = Column(String(50), default="Africa/Kigali")
    email_notifications = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")

    def __repr__(self):
        return f"<UserProfile {self.user_id}>"
