"""
Offer negotiation.

Every transition follows the same shape: load the offer, check who is
acting and what status it is in, then assign the new status and the
matching timestamps. Nothing locks the row between the read and the write.
"""
from datetime import datetime, timedelta
from typing import List, Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from app.models.item import Item, ItemStatus
from app.models.offer import Offer, OfferStatus
from app.schemas.offer import CounterResponse, OfferCreate

logger = structlog.get_logger(__name__)

OPEN_STATUSES = (OfferStatus.PENDING, OfferStatus.COUNTERED)
OFFERABLE_ITEM_STATUSES = (ItemStatus.AVAILABLE, ItemStatus.RESERVED)


async def get_offer(db: AsyncSession, offer_id: int) -> Offer:
    offer = await db.get(Offer, offer_id)
    if not offer:
        raise NotFoundError("Offer not found")
    return offer


async def get_offer_for_participant(db: AsyncSession, offer_id: int, user_id: int) -> Offer:
    offer = await get_offer(db, offer_id)
    if user_id not in (offer.buyer_id, offer.seller_id):
        raise PermissionDeniedError("Not authorized to view this offer")
    return offer


def _require_buyer(offer: Offer, user_id: int) -> None:
    if offer.buyer_id != user_id:
        raise PermissionDeniedError("Only the buyer can do this")


def _require_seller(offer: Offer, user_id: int) -> None:
    if offer.seller_id != user_id:
        raise PermissionDeniedError("Only the seller can do this")


async def _save(db: AsyncSession, offer: Offer) -> Offer:
    await db.commit()
    await db.refresh(offer)
    return offer


async def has_pending_offer(db: AsyncSession, buyer_id: int, item_id: int) -> bool:
    result = await db.execute(
        select(Offer.id).where(
            Offer.buyer_id == buyer_id,
            Offer.item_id == item_id,
            Offer.status == OfferStatus.PENDING,
        )
    )
    return result.first() is not None


async def can_make_offer(db: AsyncSession, buyer_id: int, item_id: int) -> bool:
    """Whether the buyer may open a new offer on the item right now."""
    item = await db.get(Item, item_id)
    if not item or item.seller_id == buyer_id or item.status not in OFFERABLE_ITEM_STATUSES:
        return False
    return not await has_pending_offer(db, buyer_id, item_id)


async def make_offer(db: AsyncSession, buyer_id: int, data: OfferCreate) -> Offer:
    item = await db.get(Item, data.item_id)
    if not item:
        raise NotFoundError("Item not found")
    if item.seller_id == buyer_id:
        raise InvalidStateError("Cannot make an offer on your own item")
    if item.status not in OFFERABLE_ITEM_STATUSES:
        raise InvalidStateError("Item is not available for offers")
    if await has_pending_offer(db, buyer_id, item.id):
        raise InvalidStateError("You already have a pending offer for this item")

    offer = Offer(
        item_id=item.id,
        buyer_id=buyer_id,
        seller_id=item.seller_id,
        offered_amount=data.amount,
        message=data.message,
        status=OfferStatus.PENDING,
    )
    if data.validity_hours:
        offer.expires_at = datetime.utcnow() + timedelta(hours=data.validity_hours)

    db.add(offer)
    offer = await _save(db, offer)
    logger.info("offer_made", offer_id=offer.id, item_id=item.id, buyer_id=buyer_id)
    return offer


async def update_offer(
    db: AsyncSession, offer_id: int, buyer_id: int, amount: float, message: Optional[str]
) -> Offer:
    offer = await get_offer(db, offer_id)
    _require_buyer(offer, buyer_id)
    if offer.status != OfferStatus.PENDING:
        raise InvalidStateError("Can only update pending offers")

    offer.offered_amount = amount
    offer.message = message
    return await _save(db, offer)


async def accept_offer(db: AsyncSession, offer_id: int, user_id: int) -> Offer:
    """Seller accepts the buyer's price, or buyer accepts the seller's counter."""
    offer = await get_offer(db, offer_id)
    if offer.status == OfferStatus.COUNTERED:
        # the counter came from the seller, so either side may close on it
        if user_id not in (offer.buyer_id, offer.seller_id):
            raise PermissionDeniedError("Not authorized to accept this offer")
    else:
        _require_seller(offer, user_id)
    if offer.status not in OPEN_STATUSES:
        raise InvalidStateError("Can only accept pending or countered offers")

    now = datetime.utcnow()
    offer.status = OfferStatus.ACCEPTED
    offer.accepted_at = now
    offer.responded_at = now
    offer = await _save(db, offer)
    logger.info("offer_accepted", offer_id=offer.id, amount=offer.agreed_amount)
    return offer


async def reject_offer(
    db: AsyncSession, offer_id: int, user_id: int, reason: Optional[str] = None
) -> Offer:
    offer = await get_offer(db, offer_id)
    if user_id not in (offer.buyer_id, offer.seller_id):
        raise PermissionDeniedError("Not authorized to reject this offer")
    if offer.status == OfferStatus.PENDING:
        _require_seller(offer, user_id)
    if offer.status not in OPEN_STATUSES:
        raise InvalidStateError("Can only reject pending or countered offers")

    now = datetime.utcnow()
    offer.status = OfferStatus.REJECTED
    offer.rejected_at = now
    offer.responded_at = now
    offer.counter_offer_message = reason
    offer = await _save(db, offer)
    logger.info("offer_rejected", offer_id=offer.id)
    return offer


async def counter_offer(
    db: AsyncSession, offer_id: int, seller_id: int, amount: float, message: Optional[str]
) -> Offer:
    offer = await get_offer(db, offer_id)
    _require_seller(offer, seller_id)
    if offer.status != OfferStatus.PENDING:
        raise InvalidStateError("Can only counter pending offers")

    now = datetime.utcnow()
    offer.status = OfferStatus.COUNTERED
    offer.counter_offer_amount = amount
    offer.counter_offer_message = message
    offer.counter_offer_created_at = now
    offer.responded_at = now
    offer = await _save(db, offer)
    logger.info("offer_countered", offer_id=offer.id, amount=amount)
    return offer


async def withdraw_offer(db: AsyncSession, offer_id: int, buyer_id: int) -> Offer:
    offer = await get_offer(db, offer_id)
    _require_buyer(offer, buyer_id)
    if offer.status not in OPEN_STATUSES:
        raise InvalidStateError("Can only withdraw pending or countered offers")

    offer.status = OfferStatus.WITHDRAWN
    offer.responded_at = datetime.utcnow()
    offer = await _save(db, offer)
    logger.info("offer_withdrawn", offer_id=offer.id)
    return offer


async def respond_to_counter(
    db: AsyncSession, offer_id: int, buyer_id: int, response: CounterResponse
) -> Offer:
    """
    Buyer's answer to a counter offer.

    Accepting closes the deal at the counter price; a new amount puts the
    offer back to PENDING at that amount; anything else rejects it.
    """
    offer = await get_offer(db, offer_id)
    _require_buyer(offer, buyer_id)
    if offer.status != OfferStatus.COUNTERED:
        raise InvalidStateError("Can only respond to counter offers")

    if response.accept:
        return await accept_offer(db, offer_id, buyer_id)

    if response.new_amount is not None:
        offer.offered_amount = response.new_amount
        offer.message = response.message
        offer.counter_offer_amount = None
        offer.status = OfferStatus.PENDING
        offer.created_at = datetime.utcnow()
        offer = await _save(db, offer)
        logger.info("offer_recountered", offer_id=offer.id, amount=response.new_amount)
        return offer

    return await reject_offer(db, offer_id, buyer_id, response.message)


async def mark_expired_offers(db: AsyncSession) -> int:
    """Flip PENDING offers whose expiry has passed to EXPIRED."""
    result = await db.execute(
        select(Offer).where(
            Offer.status == OfferStatus.PENDING,
            Offer.expires_at.is_not(None),
            Offer.expires_at < datetime.utcnow(),
        )
    )
    offers = result.scalars().all()
    for offer in offers:
        offer.status = OfferStatus.EXPIRED
        offer.is_expired = True
    await db.commit()

    logger.info("offers_expired", count=len(offers))
    return len(offers)


# Queries

async def _list(db: AsyncSession, *conditions) -> List[Offer]:
    result = await db.execute(
        select(Offer).where(*conditions).order_by(Offer.created_at.desc(), Offer.id.desc())
    )
    return list(result.scalars().all())


async def offers_for_item(
    db: AsyncSession, item_id: int, status: Optional[OfferStatus] = None
) -> List[Offer]:
    conditions = [Offer.item_id == item_id]
    if status:
        conditions.append(Offer.status == status)
    return await _list(db, *conditions)


async def offers_made_by(
    db: AsyncSession, buyer_id: int, status: Optional[OfferStatus] = None
) -> List[Offer]:
    conditions = [Offer.buyer_id == buyer_id]
    if status:
        conditions.append(Offer.status == status)
    return await _list(db, *conditions)


async def offers_received_by(
    db: AsyncSession, seller_id: int, status: Optional[OfferStatus] = None
) -> List[Offer]:
    conditions = [Offer.seller_id == seller_id]
    if status:
        conditions.append(Offer.status == status)
    return await _list(db, *conditions)


async def offers_for_user(
    db: AsyncSession, user_id: int, status: Optional[OfferStatus] = None
) -> List[Offer]:
    conditions = [or_(Offer.buyer_id == user_id, Offer.seller_id == user_id)]
    if status:
        conditions.append(Offer.status == status)
    return await _list(db, *conditions)


async def offers_by_status(db: AsyncSession, status: OfferStatus) -> List[Offer]:
    return await _list(db, Offer.status == status)


async def offer_history(
    db: AsyncSession, buyer_id: int, seller_id: int, item_id: int
) -> List[Offer]:
    return await _list(
        db,
        Offer.buyer_id == buyer_id,
        Offer.seller_id == seller_id,
        Offer.item_id == item_id,
    )


async def recent_offers(db: AsyncSession, days: int) -> List[Offer]:
    since = datetime.utcnow() - timedelta(days=days)
    return await _list(db, Offer.created_at >= since)


async def highest_offer_for_item(db: AsyncSession, item_id: int) -> Offer:
    result = await db.execute(
        select(Offer)
        .where(Offer.item_id == item_id, Offer.status.in_(OPEN_STATUSES))
        .order_by(Offer.offered_amount.desc(), Offer.created_at.asc())
        .limit(1)
    )
    offer = result.scalar_one_or_none()
    if not offer:
        raise NotFoundError("No open offers for this item")
    return offer


async def count_offers(
    db: AsyncSession, item_id: Optional[int] = None, status: Optional[OfferStatus] = None
) -> int:
    query = select(func.count(Offer.id))
    if item_id is not None:
        query = query.where(Offer.item_id == item_id)
    if status is not None:
        query = query.where(Offer.status == status)
    return (await db.execute(query)).scalar()
