"""Transaction endpoints."""
from typing import List, Literal
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import PermissionDeniedError
from app.core.security import get_current_admin, get_current_user, get_current_user_id
from app.models.transaction import TransactionStatus
from app.models.user import User, UserRole
from app.schemas.message import CountResponse
from app.schemas.transaction import (
    DeliveryInfo,
    NoteRequest,
    PaymentRequest,
    PaymentVerification,
    ReasonRequest,
    TransactionCreate,
    TransactionResponse,
    TransactionStatusUpdate,
)
from app.services import transaction_service

router = APIRouter()


@router.post("/", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Start a purchase of an item at the given amount."""
    return await transaction_service.create_transaction(db, user_id, transaction_data)


@router.post("/from-offer/{offer_id}", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_from_offer(
    offer_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Start a purchase at the price agreed in an accepted offer."""
    return await transaction_service.create_from_offer(db, offer_id, user_id)


@router.get("/mine", response_model=List[TransactionResponse])
async def my_transactions(
    role: Literal["buyer", "seller", "all"] = "all",
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.history_for_user(db, user_id, role)


@router.get("/status/{transaction_status}", response_model=List[TransactionResponse])
async def transactions_by_status(
    transaction_status: TransactionStatus,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.transactions_by_status(db, transaction_status)


@router.get("/item/{item_id}", response_model=List[TransactionResponse])
async def item_transactions(
    item_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.transactions_for_item(db, item_id)


@router.get("/reference/{reference}", response_model=TransactionResponse)
async def get_by_reference(
    reference: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transaction = await transaction_service.get_by_reference(db, reference)
    if current_user.role != UserRole.ADMIN and current_user.id not in (
        transaction.buyer_id,
        transaction.seller_id,
    ):
        raise PermissionDeniedError("Not authorized to view this transaction")
    return transaction


@router.get("/pending-payments", response_model=List[TransactionResponse])
async def pending_payments(
    hours_old: int = Query(24, ge=0),
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.pending_payments(db, hours_old)


@router.get("/requiring-pickup", response_model=List[TransactionResponse])
async def requiring_pickup(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.requiring_pickup(db)


@router.get("/stats/status/{transaction_status}", response_model=CountResponse)
async def count_by_status(
    transaction_status: TransactionStatus,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return CountResponse(count=await transaction_service.count_by_status(db, transaction_status))


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get transaction by ID."""
    return await transaction_service.get_transaction_for_user(db, transaction_id, current_user)


@router.get("/{transaction_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    transaction = await transaction_service.get_transaction_for_user(db, transaction_id, current_user)
    return await transaction_service.generate_receipt(db, transaction)


@router.put("/{transaction_id}/status", response_model=TransactionResponse)
async def update_status(
    transaction_id: int,
    status_data: TransactionStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.update_status(db, transaction_id, status_data.status)


@router.put("/{transaction_id}/process-payment", response_model=TransactionResponse)
async def process_payment(
    transaction_id: int,
    payment: PaymentRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.process_payment(
        db, transaction_id, user_id, payment.payment_reference
    )


@router.put("/{transaction_id}/confirm-payment", response_model=TransactionResponse)
async def confirm_payment(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.confirm_payment(db, transaction_id, user_id)


@router.put("/{transaction_id}/verify-payment", response_model=TransactionResponse)
async def verify_payment(
    transaction_id: int,
    verification: PaymentVerification,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.verify_payment(
        db, transaction_id, verification.verification_code
    )


@router.put("/{transaction_id}/delivery-info", response_model=TransactionResponse)
async def update_delivery_info(
    transaction_id: int,
    info: DeliveryInfo,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.update_delivery_info(db, transaction_id, user_id, info)


@router.put("/{transaction_id}/confirm-delivered", response_model=TransactionResponse)
async def confirm_delivered(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.confirm_delivered(db, transaction_id, user_id)


@router.put("/{transaction_id}/confirm-received", response_model=TransactionResponse)
async def confirm_received(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.confirm_received(db, transaction_id, user_id)


@router.put("/{transaction_id}/complete", response_model=TransactionResponse)
async def complete_transaction(
    transaction_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.complete_transaction(db, transaction_id, user_id)


@router.put("/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_transaction(
    transaction_id: int,
    request: ReasonRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.cancel_transaction(db, transaction_id, user_id, request.reason)


@router.put("/{transaction_id}/refund", response_model=TransactionResponse)
async def process_refund(
    transaction_id: int,
    request: ReasonRequest,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.process_refund(db, transaction_id, request.reason)


@router.put("/{transaction_id}/report-issue", response_model=TransactionResponse)
async def report_issue(
    transaction_id: int,
    request: ReasonRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.report_issue(db, transaction_id, user_id, request.reason)


@router.put("/{transaction_id}/buyer-message", response_model=TransactionResponse)
async def add_buyer_message(
    transaction_id: int,
    note: NoteRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.add_buyer_message(db, transaction_id, user_id, note.message)


@router.put("/{transaction_id}/seller-message", response_model=TransactionResponse)
async def add_seller_message(
    transaction_id: int,
    note: NoteRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.add_seller_message(db, transaction_id, user_id, note.message)
