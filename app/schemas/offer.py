"""Offer schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from app.models.offer import OfferStatus


class OfferCreate(BaseModel):
    """Schema for making an offer."""
    item_id: int
    amount: float = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=2000)
    validity_hours: Optional[int] = Field(None, ge=0, le=24 * 30)


class OfferUpdate(BaseModel):
    amount: float = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=2000)


class OfferReject(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class OfferCounter(BaseModel):
    amount: float = Field(..., gt=0)
    message: Optional[str] = Field(None, max_length=2000)


class CounterResponse(BaseModel):
    """Buyer's answer to a counter offer."""
    accept: bool = False
    new_amount: Optional[float] = Field(None, gt=0)
    message: Optional[str] = Field(None, max_length=2000)


class OfferResponse(BaseModel):
    """Schema for offer response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    buyer_id: int
    seller_id: int
    offered_amount: float
    message: Optional[str] = None
    status: OfferStatus
    counter_offer_amount: Optional[float] = None
    counter_offer_message: Optional[str] = None
    counter_offer_created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_expired: bool
    created_at: datetime
    updated_at: datetime
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
