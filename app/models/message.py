"""Message model for chat between users."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Boolean,
    DateTime, ForeignKey, Enum as SQLEnum, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class MessageType(str, enum.Enum):
    """Kind of message content."""
    TEXT = "text"
    MEDIA = "media"
    PRICE_OFFER = "price_offer"
    COUNTER_OFFER = "counter_offer"
    OFFER_ACCEPTED = "offer_accepted"
    LOCATION = "location"
    MEETUP = "meetup"
    SYSTEM = "system"


class MessageStatus(str, enum.Enum):
    """Delivery status."""
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    REPORTED = "reported"


class Message(Base):
    """Message model for chat between users."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), index=True)

    # Message content
    content = Column(Text)
    message_type = Column(SQLEnum(MessageType), default=MessageType.TEXT)
    status = Column(SQLEnum(MessageStatus), default=MessageStatus.SENT)
    is_read = Column(Boolean, default=False)

    # Attachments; LOCATION messages keep "lat,lng" in media_url
    media_url = Column(String(500))
    media_type = Column(String(50))  # image, voice, document

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    sent_at = Column(DateTime, default=datetime.utcnow, index=True)
    read_at = Column(DateTime)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], back_populates="messages_sent")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="messages_received")

    # Constraints
    __table_args__ = (
        CheckConstraint('sender_id != receiver_id', name='sender_receiver_different'),
    )

    def __repr__(self):
        return f"<Message {self.id}>"
