"""Message endpoints."""
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user_id
from app.models.message import MessageType
from app.schemas.message import (
    ConversationStart,
    CountResponse,
    LocationMessage,
    MediaMessageCreate,
    MeetupMessage,
    MessageCreate,
    MessageResponse,
    PhotoMessageCreate,
    PriceOfferMessage,
    PriceResponseMessage,
    ReportRequest,
)
from app.services import message_service

router = APIRouter()


@router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Send a message to another user."""
    return await message_service.send(
        db,
        user_id,
        message_data.receiver_id,
        content=message_data.content,
        message_type=message_data.message_type,
        item_id=message_data.item_id,
        transaction_id=message_data.transaction_id,
    )


@router.post("/start-conversation", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def start_conversation(
    data: ConversationStart,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """First message to a seller about an item."""
    return await message_service.send(
        db, user_id, data.receiver_id, content=data.content, item_id=data.item_id
    )


@router.post("/media", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_media(
    data: MediaMessageCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.send(
        db,
        user_id,
        data.receiver_id,
        message_type=MessageType.MEDIA,
        media_url=data.media_url,
        media_type=data.media_type,
    )


@router.post("/photo", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_photo(
    data: PhotoMessageCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.send(
        db,
        user_id,
        data.receiver_id,
        content=data.caption,
        message_type=MessageType.MEDIA,
        media_url=data.photo_url,
        media_type="image",
    )


@router.post("/price-offer", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_price_offer(
    data: PriceOfferMessage,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.send_price_offer(
        db, user_id, data.receiver_id, data.item_id, data.offer_price
    )


@router.post("/price-response", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def respond_to_price_offer(
    data: PriceResponseMessage,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.respond_to_price_offer(
        db, user_id, data.receiver_id, data.item_id, data.accepted, data.counter_offer
    )


@router.post("/share-location", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def share_location(
    data: LocationMessage,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.share_location(
        db, user_id, data.receiver_id, data.latitude, data.longitude, data.location_name
    )


@router.post("/schedule-meetup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def schedule_meetup(
    data: MeetupMessage,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.schedule_meetup(
        db, user_id, data.receiver_id, data.meetup_time, data.location, data.item_id
    )


@router.get("/conversations", response_model=List[MessageResponse])
async def list_conversations(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Every message the current user sent or received, newest first."""
    return await message_service.all_for_user(db, user_id)


@router.get("/conversation/{other_user_id}", response_model=List[MessageResponse])
async def conversation_history(
    other_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.conversation_history(db, user_id, other_user_id)


@router.get("/latest/{other_user_id}", response_model=MessageResponse)
async def latest_message(
    other_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.latest_between(db, user_id, other_user_id)


@router.get("/unread", response_model=List[MessageResponse])
async def unread_messages(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.received(db, user_id, is_read=False)


@router.get("/unread-count", response_model=CountResponse)
async def unread_count(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await message_service.unread_count(db, user_id))


@router.get("/read", response_model=List[MessageResponse])
async def read_messages(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.received(db, user_id, is_read=True)


@router.get("/notifications", response_model=List[MessageResponse])
async def notifications(
    limit: int = Query(10, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.recent_notifications(db, user_id, limit)


@router.get("/item/{item_id}", response_model=List[MessageResponse])
async def item_messages(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.for_item(db, user_id, item_id)


@router.get("/transaction/{transaction_id}", response_model=List[MessageResponse])
async def transaction_messages(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.for_transaction(db, user_id, transaction_id)


@router.get("/media/{media_type}", response_model=List[MessageResponse])
async def media_messages(
    media_type: str,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.media_sent(db, user_id, media_type)


@router.get("/search", response_model=List[MessageResponse])
async def search_messages(
    query: str = Query(..., min_length=1),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.search(db, user_id, query)


@router.get("/date-range", response_model=List[MessageResponse])
async def messages_in_range(
    start: datetime,
    end: datetime,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.in_date_range(db, user_id, start, end)


@router.put("/read-all", response_model=CountResponse)
async def mark_all_as_read(
    sender_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark everything unread from ``sender_id`` as read."""
    return CountResponse(count=await message_service.mark_all_as_read(db, user_id, sender_id))


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.get_message(db, message_id, user_id)


@router.put("/{message_id}/read", response_model=MessageResponse)
async def mark_as_read(
    message_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.mark_as_read(db, message_id, user_id)


@router.put("/{message_id}/unread", response_model=MessageResponse)
async def mark_as_unread(
    message_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.mark_as_unread(db, message_id, user_id)


@router.post("/{message_id}/report", response_model=MessageResponse)
async def report_message(
    message_id: int,
    report: ReportRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.report_message(db, message_id, user_id, report.reason)


@router.delete("/conversation/{other_user_id}", response_model=CountResponse)
async def delete_conversation(
    other_user_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await message_service.delete_conversation(db, user_id, other_user_id))


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await message_service.delete_message(db, message_id, user_id)
