"""Chat messages between buyers and sellers."""
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from app.models.message import Message, MessageStatus, MessageType
from app.models.user import User

logger = structlog.get_logger(__name__)


def _between(user1: int, user2: int):
    return or_(
        and_(Message.sender_id == user1, Message.receiver_id == user2),
        and_(Message.sender_id == user2, Message.receiver_id == user1),
    )


def _involving(user_id: int):
    return or_(Message.sender_id == user_id, Message.receiver_id == user_id)


def _naive_utc(value: datetime) -> datetime:
    """sent_at is stored as naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def _list(db: AsyncSession, *conditions, newest_first: bool = False, limit: Optional[int] = None):
    order = (Message.sent_at.desc(), Message.id.desc()) if newest_first else (
        Message.sent_at.asc(), Message.id.asc()
    )
    query = select(Message).where(*conditions).order_by(*order)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def send(
    db: AsyncSession,
    sender_id: int,
    receiver_id: int,
    content: Optional[str] = None,
    message_type: MessageType = MessageType.TEXT,
    item_id: Optional[int] = None,
    transaction_id: Optional[int] = None,
    media_url: Optional[str] = None,
    media_type: Optional[str] = None,
) -> Message:
    """Store a message from ``sender_id`` to ``receiver_id``."""
    if sender_id == receiver_id:
        raise InvalidStateError("Cannot send message to yourself")
    if not await db.get(User, receiver_id):
        raise NotFoundError("Receiver not found")

    now = datetime.utcnow()
    message = Message(
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        message_type=message_type,
        status=MessageStatus.SENT,
        item_id=item_id,
        transaction_id=transaction_id,
        media_url=media_url,
        media_type=media_type,
        sent_at=now,
        updated_at=now,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    logger.info(
        "message_sent",
        message_id=message.id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        message_type=message_type.value,
    )
    return message


async def send_price_offer(
    db: AsyncSession, sender_id: int, receiver_id: int, item_id: int, offer_price: float
) -> Message:
    return await send(
        db, sender_id, receiver_id,
        content=f"Price offer: ${offer_price:.2f}",
        message_type=MessageType.PRICE_OFFER,
        item_id=item_id,
    )


async def respond_to_price_offer(
    db: AsyncSession,
    sender_id: int,
    receiver_id: int,
    item_id: int,
    accepted: bool,
    counter_offer: Optional[float] = None,
) -> Message:
    if accepted:
        content, message_type = "Offer accepted!", MessageType.OFFER_ACCEPTED
    elif counter_offer is not None:
        content, message_type = f"Counter offer: ${counter_offer:.2f}", MessageType.COUNTER_OFFER
    else:
        raise InvalidStateError("A counter offer amount is required when not accepting")
    return await send(
        db, sender_id, receiver_id, content=content, message_type=message_type, item_id=item_id
    )


async def share_location(
    db: AsyncSession,
    sender_id: int,
    receiver_id: int,
    latitude: float,
    longitude: float,
    location_name: str,
) -> Message:
    return await send(
        db, sender_id, receiver_id,
        content=f"Shared location: {location_name}",
        message_type=MessageType.LOCATION,
        media_url=f"{latitude},{longitude}",
    )


async def schedule_meetup(
    db: AsyncSession,
    sender_id: int,
    receiver_id: int,
    meetup_time: datetime,
    location: str,
    item_id: Optional[int] = None,
) -> Message:
    return await send(
        db, sender_id, receiver_id,
        content=f"Meetup scheduled for {meetup_time.isoformat(timespec='minutes')} at {location}",
        message_type=MessageType.MEETUP,
        item_id=item_id,
    )


async def get_message(db: AsyncSession, message_id: int, user_id: int) -> Message:
    """Fetch a message the user sent or received."""
    message = await db.get(Message, message_id)
    if not message:
        raise NotFoundError("Message not found")
    if user_id not in (message.sender_id, message.receiver_id):
        raise PermissionDeniedError("Not authorized to access this message")
    return message


async def _set_read(db: AsyncSession, message_id: int, user_id: int, read: bool) -> Message:
    message = await get_message(db, message_id, user_id)
    if message.receiver_id != user_id:
        raise PermissionDeniedError("Only the receiver can change read status")

    message.is_read = read
    message.read_at = datetime.utcnow() if read else None
    message.status = MessageStatus.READ if read else MessageStatus.DELIVERED
    message.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(message)
    return message


async def mark_as_read(db: AsyncSession, message_id: int, user_id: int) -> Message:
    return await _set_read(db, message_id, user_id, True)


async def mark_as_unread(db: AsyncSession, message_id: int, user_id: int) -> Message:
    return await _set_read(db, message_id, user_id, False)


async def mark_all_as_read(db: AsyncSession, receiver_id: int, sender_id: int) -> int:
    unread = await _list(
        db,
        Message.sender_id == sender_id,
        Message.receiver_id == receiver_id,
        Message.is_read.is_(False),
    )
    now = datetime.utcnow()
    for message in unread:
        message.is_read = True
        message.read_at = now
        message.status = MessageStatus.READ
    await db.commit()
    return len(unread)


async def report_message(
    db: AsyncSession, message_id: int, reporter_id: int, reason: Optional[str] = None
) -> Message:
    message = await get_message(db, message_id, reporter_id)
    message.status = MessageStatus.REPORTED
    message.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(message)
    logger.warning("message_reported", message_id=message_id, reporter_id=reporter_id, reason=reason)
    return message


async def delete_message(db: AsyncSession, message_id: int, user_id: int) -> None:
    message = await get_message(db, message_id, user_id)
    if message.sender_id != user_id:
        raise PermissionDeniedError("Only the sender can delete a message")
    await db.delete(message)
    await db.commit()


async def delete_conversation(db: AsyncSession, user_id: int, other_user_id: int) -> int:
    result = await db.execute(delete(Message).where(_between(user_id, other_user_id)))
    await db.commit()
    logger.info("conversation_deleted", user_id=user_id, other_user_id=other_user_id)
    return result.rowcount


# Queries

async def conversation_history(db: AsyncSession, user_id: int, other_user_id: int) -> List[Message]:
    return await _list(db, _between(user_id, other_user_id))


async def latest_between(db: AsyncSession, user_id: int, other_user_id: int) -> Message:
    messages = await _list(db, _between(user_id, other_user_id), newest_first=True, limit=1)
    if not messages:
        raise NotFoundError("No messages between these users")
    return messages[0]


async def all_for_user(db: AsyncSession, user_id: int) -> List[Message]:
    return await _list(db, _involving(user_id), newest_first=True)


async def received(db: AsyncSession, user_id: int, is_read: bool) -> List[Message]:
    return await _list(
        db, Message.receiver_id == user_id, Message.is_read.is_(is_read), newest_first=True
    )


async def unread_count(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Message.id)).where(
            Message.receiver_id == user_id, Message.is_read.is_(False)
        )
    )
    return result.scalar()


async def recent_notifications(db: AsyncSession, user_id: int, limit: int = 10) -> List[Message]:
    return await _list(
        db,
        Message.receiver_id == user_id,
        Message.is_read.is_(False),
        newest_first=True,
        limit=limit,
    )


async def for_item(db: AsyncSession, user_id: int, item_id: int) -> List[Message]:
    return await _list(db, Message.item_id == item_id, _involving(user_id))


async def for_transaction(db: AsyncSession, user_id: int, transaction_id: int) -> List[Message]:
    return await _list(db, Message.transaction_id == transaction_id, _involving(user_id))


async def media_sent(db: AsyncSession, user_id: int, media_type: str) -> List[Message]:
    return await _list(db, Message.sender_id == user_id, Message.media_type == media_type)


async def search(db: AsyncSession, user_id: int, query: str) -> List[Message]:
    return await _list(
        db, _involving(user_id), Message.content.ilike(f"%{query}%"), newest_first=True
    )


async def in_date_range(
    db: AsyncSession, user_id: int, start: datetime, end: datetime
) -> List[Message]:
    start, end = _naive_utc(start), _naive_utc(end)
    if start > end:
        raise InvalidStateError("start must be before end")
    return await _list(db, _involving(user_id), Message.sent_at.between(start, end))
