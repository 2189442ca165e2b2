"""Transaction schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from app.models.transaction import PaymentMethod, TransactionStatus


class TransactionCreate(BaseModel):
    """Schema for creating a transaction."""
    item_id: int
    amount: float = Field(..., gt=0)
    payment_method: Optional[PaymentMethod] = None
    buyer_phone_number: Optional[str] = Field(None, max_length=20)
    seller_phone_number: Optional[str] = Field(None, max_length=20)


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class PaymentRequest(BaseModel):
    payment_reference: str = Field(..., min_length=1, max_length=64)


class PaymentVerification(BaseModel):
    verification_code: Optional[str] = None


class DeliveryInfo(BaseModel):
    pickup_location: str = Field(..., min_length=1, max_length=300)
    pickup_date: Optional[datetime] = None
    pickup_instructions: Optional[str] = None


class ReasonRequest(BaseModel):
    """Free-text reason for cancellation, refund or dispute."""
    reason: Optional[str] = None


class NoteRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: Optional[int] = None
    offer_id: Optional[int] = None
    buyer_id: int
    seller_id: int
    amount: float
    payment_method: Optional[PaymentMethod] = None
    status: TransactionStatus
    transaction_reference: str
    payment_reference: Optional[str] = None
    buyer_phone_number: Optional[str] = None
    seller_phone_number: Optional[str] = None
    pickup_location: Optional[str] = None
    pickup_date: Optional[datetime] = None
    pickup_instructions: Optional[str] = None
    buyer_message: Optional[str] = None
    seller_message: Optional[str] = None
    cancellation_reason: Optional[str] = None
    dispute_description: Optional[str] = None
    is_refunded: bool
    created_at: datetime
    updated_at: datetime
    payment_confirmed_at: Optional[datetime] = None
    pickup_completed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
