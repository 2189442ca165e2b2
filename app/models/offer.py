"""Offer model for price negotiation."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, Text, Float, Boolean,
    DateTime, ForeignKey, Enum as SQLEnum, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class OfferStatus(str, enum.Enum):
    """Offer status."""
    PENDING = "pending"
    COUNTERED = "countered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    EXPIRED = "expired"


class Offer(Base):
    """A buyer-proposed price for an item."""

    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    offered_amount = Column(Float, nullable=False)
    message = Column(Text)
    status = Column(SQLEnum(OfferStatus), default=OfferStatus.PENDING, index=True)

    # Seller's counter proposal; also holds the rejection reason
    counter_offer_amount = Column(Float)
    counter_offer_message = Column(Text)
    counter_offer_created_at = Column(DateTime)

    # Expiry is only applied by the mark-expired batch
    expires_at = Column(DateTime, index=True)
    is_expired = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    accepted_at = Column(DateTime)
    rejected_at = Column(DateTime)
    responded_at = Column(DateTime)

    # Relationships
    item = relationship("Item", back_populates="offers")
    buyer = relationship("User", foreign_keys=[buyer_id], back_populates="offers_made")
    seller = relationship("User", foreign_keys=[seller_id], back_populates="offers_received")

    __table_args__ = (
        CheckConstraint('buyer_id != seller_id', name='offer_buyer_seller_different'),
        CheckConstraint('offered_amount > 0', name='offered_amount_positive'),
    )

    @property
    def agreed_amount(self) -> float:
        """Price both sides settled on: the counter amount when one was made."""
        if self.counter_offer_amount is not None and self.status == OfferStatus.ACCEPTED:
            return self.counter_offer_amount
        return self.offered_amount

    def __repr__(self):
        return f"<Offer {self.id}>"
