"""Offer endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import PermissionDeniedError
from app.core.security import get_current_admin, get_current_user_id
from app.models.offer import OfferStatus
from app.models.user import User
from app.schemas.message import CountResponse
from app.schemas.offer import (
    CounterResponse,
    OfferCounter,
    OfferCreate,
    OfferReject,
    OfferResponse,
    OfferUpdate,
)
from app.services import offer_service

router = APIRouter()


@router.post("/", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
async def make_offer(
    offer_data: OfferCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Make an offer on someone else's item."""
    return await offer_service.make_offer(db, user_id, offer_data)


@router.get("/made", response_model=List[OfferResponse])
async def offers_made(
    status: Optional[OfferStatus] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_made_by(db, user_id, status)


@router.get("/received", response_model=List[OfferResponse])
async def offers_received(
    status: Optional[OfferStatus] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_received_by(db, user_id, status)


@router.get("/mine", response_model=List[OfferResponse])
async def my_offers(
    status: Optional[OfferStatus] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Offers where the current user is buyer or seller."""
    return await offer_service.offers_for_user(db, user_id, status)


@router.get("/item/{item_id}", response_model=List[OfferResponse])
async def item_offers(
    item_id: int,
    status: Optional[OfferStatus] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_for_item(db, item_id, status)


@router.get("/item/{item_id}/pending", response_model=List[OfferResponse])
async def pending_item_offers(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_for_item(db, item_id, OfferStatus.PENDING)


@router.get("/item/{item_id}/highest", response_model=OfferResponse)
async def highest_item_offer(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.highest_offer_for_item(db, item_id)


@router.get("/item/{item_id}/count", response_model=CountResponse)
async def count_item_offers(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await offer_service.count_offers(db, item_id=item_id))


@router.get("/status/{offer_status}", response_model=List[OfferResponse])
async def offers_by_status(
    offer_status: OfferStatus,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_by_status(db, offer_status)


@router.get("/stats/status/{offer_status}", response_model=CountResponse)
async def count_offers_by_status(
    offer_status: OfferStatus,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await offer_service.count_offers(db, status=offer_status))


@router.get("/history", response_model=List[OfferResponse])
async def offer_history(
    buyer_id: int,
    seller_id: int,
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Negotiation history between a buyer and seller on one item."""
    if user_id not in (buyer_id, seller_id):
        raise PermissionDeniedError("Not authorized to view this history")
    return await offer_service.offer_history(db, buyer_id, seller_id, item_id)


@router.get("/recent", response_model=List[OfferResponse])
async def recent_offers(
    days: int = Query(30, ge=1, le=365),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.recent_offers(db, days)


@router.get("/expired", response_model=List[OfferResponse])
async def expired_offers(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.offers_by_status(db, OfferStatus.EXPIRED)


@router.get("/can-make-offer")
async def can_make_offer(
    item_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return {"can_make_offer": await offer_service.can_make_offer(db, user_id, item_id)}


@router.post("/mark-expired", response_model=CountResponse)
async def mark_expired(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Expire PENDING offers whose validity has run out."""
    return CountResponse(count=await offer_service.mark_expired_offers(db))


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(
    offer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.get_offer_for_participant(db, offer_id, user_id)


@router.put("/{offer_id}", response_model=OfferResponse)
async def update_offer(
    offer_id: int,
    offer_data: OfferUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.update_offer(
        db, offer_id, user_id, offer_data.amount, offer_data.message
    )


@router.put("/{offer_id}/accept", response_model=OfferResponse)
async def accept_offer(
    offer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.accept_offer(db, offer_id, user_id)


@router.put("/{offer_id}/reject", response_model=OfferResponse)
async def reject_offer(
    offer_id: int,
    rejection: Optional[OfferReject] = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    reason = rejection.reason if rejection else None
    return await offer_service.reject_offer(db, offer_id, user_id, reason)


@router.put("/{offer_id}/counter", response_model=OfferResponse)
async def counter_offer(
    offer_id: int,
    counter: OfferCounter,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.counter_offer(
        db, offer_id, user_id, counter.amount, counter.message
    )


@router.put("/{offer_id}/withdraw", response_model=OfferResponse)
async def withdraw_offer(
    offer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.withdraw_offer(db, offer_id, user_id)


@router.put("/{offer_id}/respond-counter", response_model=OfferResponse)
async def respond_to_counter(
    offer_id: int,
    response: CounterResponse,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await offer_service.respond_to_counter(db, offer_id, user_id, response)
