"""Transaction model."""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, Float, Boolean,
    DateTime, ForeignKey, Enum as SQLEnum, CheckConstraint
)
from sqlalchemy.orm import relationship
import enum

from app.core.database import Base


class TransactionStatus(str, enum.Enum):
    """Transaction status."""
    PENDING = "pending"
    PAYMENT_SENT = "payment_sent"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PICKUP_ARRANGED = "pickup_arranged"
    PICKUP_COMPLETED = "pickup_completed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


class PaymentMethod(str, enum.Enum):
    """Payment method."""
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"


class Transaction(Base):
    """Payment and pickup record between a buyer and a seller for one item."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=True, index=True)
    offer_id = Column(Integer, ForeignKey("offers.id"), nullable=True, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Transaction details
    amount = Column(Float, nullable=False)
    payment_method = Column(SQLEnum(PaymentMethod))
    status = Column(SQLEnum(TransactionStatus), default=TransactionStatus.PENDING, index=True)
    transaction_reference = Column(String(64), unique=True, index=True)
    payment_reference = Column(String(64))
    buyer_phone_number = Column(String(20))
    seller_phone_number = Column(String(20))

    # Pickup details
    pickup_location = Column(String(300))
    pickup_date = Column(DateTime)
    pickup_instructions = Column(Text)

    # Notes
    buyer_message = Column(Text)
    seller_message = Column(Text)
    cancellation_reason = Column(Text)
    dispute_description = Column(Text)
    is_refunded = Column(Boolean, default=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    payment_confirmed_at = Column(DateTime)
    pickup_completed_at = Column(DateTime)
    completed_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    refunded_at = Column(DateTime)

    # Relationships
    item = relationship("Item", back_populates="transactions")
    buyer = relationship("User", foreign_keys=[buyer_id], back_populates="transactions_as_buyer")
    seller = relationship("User", foreign_keys=[seller_id], back_populates="transactions_as_seller")

    # Constraints
    __table_args__ = (
        CheckConstraint('buyer_id != seller_id', name='buyer_seller_different'),
        CheckConstraint('amount > 0', name='amount_positive'),
    )

    def __repr__(self):
        return f"<Transaction {self.transaction_reference}>"
