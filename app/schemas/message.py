"""Message schemas."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from app.models.message import MessageStatus, MessageType


class MessageCreate(BaseModel):
    """Schema for sending a message."""
    receiver_id: int
    content: str = Field(..., min_length=1, max_length=5000)
    message_type: MessageType = MessageType.TEXT
    item_id: Optional[int] = None
    transaction_id: Optional[int] = None


class ConversationStart(BaseModel):
    receiver_id: int
    item_id: int
    content: str = Field(..., min_length=1, max_length=5000)


class MediaMessageCreate(BaseModel):
    receiver_id: int
    media_url: str = Field(..., max_length=500)
    media_type: str = Field(..., max_length=50)


class PhotoMessageCreate(BaseModel):
    receiver_id: int
    photo_url: str = Field(..., max_length=500)
    caption: Optional[str] = Field(None, max_length=5000)


class PriceOfferMessage(BaseModel):
    receiver_id: int
    item_id: int
    offer_price: float = Field(..., gt=0)


class PriceResponseMessage(BaseModel):
    receiver_id: int
    item_id: int
    accepted: bool
    counter_offer: Optional[float] = Field(None, gt=0)


class LocationMessage(BaseModel):
    receiver_id: int
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    location_name: str = Field(..., max_length=200)


class MeetupMessage(BaseModel):
    receiver_id: int
    item_id: Optional[int] = None
    meetup_time: datetime
    location: str = Field(..., max_length=300)


class ReportRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class MessageResponse(BaseModel):
    """Schema for message response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    item_id: Optional[int] = None
    transaction_id: Optional[int] = None
    content: Optional[str] = None
    message_type: MessageType
    status: MessageStatus
    is_read: bool
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    created_at: datetime
    sent_at: datetime
    read_at: Optional[datetime] = None


class CountResponse(BaseModel):
    count: int
