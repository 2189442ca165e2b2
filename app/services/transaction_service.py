"""
Transaction lifecycle with manual payment confirmation.

PENDING -> PAYMENT_SENT -> PAYMENT_CONFIRMED -> PICKUP_ARRANGED ->
PICKUP_COMPLETED -> COMPLETED, plus CANCELLED and DISPUTED. Each endpoint
assigns one status directly; the item's own status is left untouched.
"""
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidStateError, NotFoundError, PermissionDeniedError
from app.models.item import Item
from app.models.offer import OfferStatus
from app.models.transaction import Transaction, TransactionStatus
from app.models.user import User, UserRole
from app.schemas.transaction import DeliveryInfo, TransactionCreate
from app.services import offer_service, user_service

logger = structlog.get_logger(__name__)

# Timestamp column stamped when a transaction enters the status
STATUS_TIMESTAMPS = {
    TransactionStatus.PAYMENT_CONFIRMED: "payment_confirmed_at",
    TransactionStatus.PICKUP_COMPLETED: "pickup_completed_at",
    TransactionStatus.COMPLETED: "completed_at",
    TransactionStatus.CANCELLED: "cancelled_at",
}


def generate_reference() -> str:
    return "TXN-" + uuid.uuid4().hex[:8].upper()


async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
    transaction = await db.get(Transaction, transaction_id)
    if not transaction:
        raise NotFoundError("Transaction not found")
    return transaction


async def get_transaction_for_user(db: AsyncSession, transaction_id: int, user: User) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    if user.role != UserRole.ADMIN and user.id not in (transaction.buyer_id, transaction.seller_id):
        raise PermissionDeniedError("Not authorized to view this transaction")
    return transaction


def _require_participant(transaction: Transaction, user_id: int) -> None:
    if user_id not in (transaction.buyer_id, transaction.seller_id):
        raise PermissionDeniedError("Only the buyer or seller can do this")


def _require_buyer(transaction: Transaction, user_id: int) -> None:
    if transaction.buyer_id != user_id:
        raise PermissionDeniedError("Only the buyer can do this")


def _require_seller(transaction: Transaction, user_id: int) -> None:
    if transaction.seller_id != user_id:
        raise PermissionDeniedError("Only the seller can do this")


async def _set_status(db: AsyncSession, transaction: Transaction, status: TransactionStatus) -> None:
    """Assign the status, stamp its timestamp and credit profiles on completion."""
    previous = transaction.status
    transaction.status = status

    timestamp_field = STATUS_TIMESTAMPS.get(status)
    if timestamp_field:
        setattr(transaction, timestamp_field, datetime.utcnow())

    if status == TransactionStatus.COMPLETED and previous != TransactionStatus.COMPLETED:
        await user_service.increment_profile_counters(
            db, transaction.seller_id, items_sold=1, total_transactions=1
        )
        await user_service.increment_profile_counters(
            db, transaction.buyer_id, items_purchased=1, total_transactions=1
        )

    logger.info(
        "transaction_status_changed",
        transaction_id=transaction.id,
        old=previous.value if previous else None,
        new=status.value,
    )


async def _save(db: AsyncSession, transaction: Transaction) -> Transaction:
    await db.commit()
    await db.refresh(transaction)
    return transaction


async def create_transaction(db: AsyncSession, buyer_id: int, data: TransactionCreate) -> Transaction:
    item = await db.get(Item, data.item_id)
    if not item:
        raise NotFoundError("Item not found")
    if item.seller_id == buyer_id:
        raise InvalidStateError("Cannot buy your own item")

    transaction = Transaction(
        item_id=item.id,
        buyer_id=buyer_id,
        seller_id=item.seller_id,
        amount=data.amount,
        payment_method=data.payment_method,
        buyer_phone_number=data.buyer_phone_number,
        seller_phone_number=data.seller_phone_number,
        transaction_reference=generate_reference(),
        status=TransactionStatus.PENDING,
    )
    db.add(transaction)
    transaction = await _save(db, transaction)
    logger.info("transaction_created", transaction_id=transaction.id, item_id=item.id)
    return transaction


async def create_from_offer(db: AsyncSession, offer_id: int, user_id: int) -> Transaction:
    offer = await offer_service.get_offer_for_participant(db, offer_id, user_id)
    if offer.status != OfferStatus.ACCEPTED:
        raise InvalidStateError("Only accepted offers can become transactions")

    transaction = Transaction(
        item_id=offer.item_id,
        offer_id=offer.id,
        buyer_id=offer.buyer_id,
        seller_id=offer.seller_id,
        amount=offer.agreed_amount,
        transaction_reference=generate_reference(),
        status=TransactionStatus.PENDING,
    )
    db.add(transaction)
    transaction = await _save(db, transaction)
    logger.info("transaction_created", transaction_id=transaction.id, offer_id=offer.id)
    return transaction


async def update_status(
    db: AsyncSession, transaction_id: int, status: TransactionStatus
) -> Transaction:
    """Direct status assignment with no prior-state check."""
    transaction = await get_transaction(db, transaction_id)
    await _set_status(db, transaction, status)
    return await _save(db, transaction)


async def process_payment(
    db: AsyncSession, transaction_id: int, buyer_id: int, payment_reference: str
) -> Transaction:
    """Buyer reports the payment as sent."""
    transaction = await get_transaction(db, transaction_id)
    _require_buyer(transaction, buyer_id)
    if transaction.status != TransactionStatus.PENDING:
        raise InvalidStateError("Transaction is not in pending status")

    await _set_status(db, transaction, TransactionStatus.PAYMENT_SENT)
    transaction.payment_reference = payment_reference
    return await _save(db, transaction)


async def confirm_payment(db: AsyncSession, transaction_id: int, seller_id: int) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_seller(transaction, seller_id)
    if transaction.status != TransactionStatus.PAYMENT_SENT:
        raise InvalidStateError("Payment not yet sent")

    await _set_status(db, transaction, TransactionStatus.PAYMENT_CONFIRMED)
    return await _save(db, transaction)


async def verify_payment(
    db: AsyncSession, transaction_id: int, verification_code: Optional[str] = None
) -> Transaction:
    """Administrative confirmation; the code is recorded in the log only."""
    transaction = await get_transaction(db, transaction_id)
    await _set_status(db, transaction, TransactionStatus.PAYMENT_CONFIRMED)
    logger.info(
        "payment_verified",
        transaction_id=transaction_id,
        has_code=verification_code is not None,
    )
    return await _save(db, transaction)


async def update_delivery_info(
    db: AsyncSession, transaction_id: int, user_id: int, info: DeliveryInfo
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_participant(transaction, user_id)
    if transaction.status in (TransactionStatus.COMPLETED, TransactionStatus.CANCELLED):
        raise InvalidStateError("Transaction is already closed")

    transaction.pickup_location = info.pickup_location
    transaction.pickup_date = info.pickup_date
    transaction.pickup_instructions = info.pickup_instructions
    await _set_status(db, transaction, TransactionStatus.PICKUP_ARRANGED)
    return await _save(db, transaction)


async def confirm_delivered(db: AsyncSession, transaction_id: int, seller_id: int) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_seller(transaction, seller_id)
    await _set_status(db, transaction, TransactionStatus.PICKUP_COMPLETED)
    return await _save(db, transaction)


async def confirm_received(db: AsyncSession, transaction_id: int, buyer_id: int) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_buyer(transaction, buyer_id)
    await _set_status(db, transaction, TransactionStatus.COMPLETED)
    return await _save(db, transaction)


async def complete_transaction(db: AsyncSession, transaction_id: int, user_id: int) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_participant(transaction, user_id)
    if transaction.status != TransactionStatus.PICKUP_COMPLETED:
        raise InvalidStateError("Transaction cannot be completed in current status")

    await _set_status(db, transaction, TransactionStatus.COMPLETED)
    return await _save(db, transaction)


async def cancel_transaction(
    db: AsyncSession, transaction_id: int, user_id: int, reason: Optional[str]
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_participant(transaction, user_id)

    transaction.cancellation_reason = reason
    await _set_status(db, transaction, TransactionStatus.CANCELLED)
    return await _save(db, transaction)


async def process_refund(
    db: AsyncSession, transaction_id: int, reason: Optional[str]
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    if transaction.status not in (TransactionStatus.CANCELLED, TransactionStatus.DISPUTED):
        raise InvalidStateError("Cannot refund transaction in current status")

    transaction.is_refunded = True
    transaction.refunded_at = datetime.utcnow()
    transaction.cancellation_reason = reason
    logger.info("transaction_refunded", transaction_id=transaction_id)
    return await _save(db, transaction)


async def report_issue(
    db: AsyncSession, transaction_id: int, user_id: int, description: Optional[str]
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_participant(transaction, user_id)

    transaction.dispute_description = description
    await _set_status(db, transaction, TransactionStatus.DISPUTED)
    return await _save(db, transaction)


async def add_buyer_message(
    db: AsyncSession, transaction_id: int, buyer_id: int, message: str
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_buyer(transaction, buyer_id)
    transaction.buyer_message = message
    return await _save(db, transaction)


async def add_seller_message(
    db: AsyncSession, transaction_id: int, seller_id: int, message: str
) -> Transaction:
    transaction = await get_transaction(db, transaction_id)
    _require_seller(transaction, seller_id)
    transaction.seller_message = message
    return await _save(db, transaction)


# Queries

async def _list(db: AsyncSession, *conditions) -> List[Transaction]:
    result = await db.execute(
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    )
    return list(result.scalars().all())


async def history_for_user(db: AsyncSession, user_id: int, role: str = "all") -> List[Transaction]:
    if role == "buyer":
        return await _list(db, Transaction.buyer_id == user_id)
    if role == "seller":
        return await _list(db, Transaction.seller_id == user_id)
    return await _list(db, or_(Transaction.buyer_id == user_id, Transaction.seller_id == user_id))


async def transactions_by_status(db: AsyncSession, status: TransactionStatus) -> List[Transaction]:
    return await _list(db, Transaction.status == status)


async def transactions_for_item(db: AsyncSession, item_id: int) -> List[Transaction]:
    return await _list(db, Transaction.item_id == item_id)


async def get_by_reference(db: AsyncSession, reference: str) -> Transaction:
    result = await db.execute(
        select(Transaction).where(Transaction.transaction_reference == reference)
    )
    transaction = result.scalar_one_or_none()
    if not transaction:
        raise NotFoundError("Transaction not found")
    return transaction


async def pending_payments(db: AsyncSession, hours_old: int) -> List[Transaction]:
    """Transactions still waiting on payment that were opened before the cutoff."""
    cutoff = datetime.utcnow() - timedelta(hours=hours_old)
    return await _list(
        db,
        Transaction.status.in_((TransactionStatus.PENDING, TransactionStatus.PAYMENT_SENT)),
        Transaction.created_at < cutoff,
    )


async def requiring_pickup(db: AsyncSession) -> List[Transaction]:
    return await _list(
        db,
        Transaction.status == TransactionStatus.PAYMENT_CONFIRMED,
        Transaction.pickup_date.is_not(None),
    )


async def count_by_status(db: AsyncSession, status: TransactionStatus) -> int:
    result = await db.execute(
        select(func.count(Transaction.id)).where(Transaction.status == status)
    )
    return result.scalar()


async def generate_receipt(db: AsyncSession, transaction: Transaction) -> str:
    """Plain-text receipt."""
    buyer = await db.get(User, transaction.buyer_id)
    seller = await db.get(User, transaction.seller_id)
    payment_method = transaction.payment_method.value if transaction.payment_method else "n/a"
    lines = [
        "HOUSE TREASURE TRANSACTION RECEIPT",
        "=" * 37,
        f"Transaction ID: {transaction.id}",
        f"Reference: {transaction.transaction_reference}",
        f"Date: {transaction.created_at.isoformat()}",
        f"Amount: RWF {transaction.amount:,.2f}",
        f"Status: {transaction.status.value.upper()}",
        f"Payment Method: {payment_method}",
        f"Buyer: {buyer.username if buyer else transaction.buyer_id}",
        f"Seller: {seller.username if seller else transaction.seller_id}",
        "=" * 37,
    ]
    return "\n".join(lines) + "\n"
