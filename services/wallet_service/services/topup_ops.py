"""Top-up flow: pending requests confirmed once payment is received."""

import random
import string
import uuid

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, StateConflict
from libs.common.logging import get_logger
from services.wallet_service.models import (
    PaymentMethod,
    TopupStatus,
    TransactionType,
    WalletTopup,
)
from services.wallet_service.services.wallet_ops import (
    credit_wallet,
    get_or_create_wallet,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _generate_topup_reference() -> str:
    """Generate a unique topup reference like TOP-A1B2C3."""
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"TOP-{suffix}"


async def initiate_topup(
    db: AsyncSession,
    *,
    auth_id: str,
    amount: int,
    payment_method: PaymentMethod,
) -> WalletTopup:
    """Create a pending top-up. The payment gateway itself is external."""
    wallet = await get_or_create_wallet(db, auth_id)
    topup = WalletTopup(
        wallet_id=wallet.id,
        auth_id=auth_id,
        reference=_generate_topup_reference(),
        amount=amount,
        payment_method=payment_method,
        status=TopupStatus.PENDING,
    )
    db.add(topup)
    await db.flush()
    logger.info("Top-up %s initiated for %s (%d VND)", topup.reference, auth_id, amount)
    return topup


async def get_topup(db: AsyncSession, topup_id: uuid.UUID) -> WalletTopup:
    result = await db.execute(select(WalletTopup).where(WalletTopup.id == topup_id))
    topup = result.scalar_one_or_none()
    if not topup:
        raise NotFound("Top-up not found")
    return topup


async def confirm_topup(
    db: AsyncSession,
    topup: WalletTopup,
    *,
    payment_reference: str,
    confirmed_by: str,
) -> WalletTopup:
    """Mark a pending top-up completed and credit the wallet."""
    if topup.status != TopupStatus.PENDING:
        raise StateConflict(f"Top-up is already {topup.status.value}")

    await credit_wallet(
        db,
        auth_id=topup.auth_id,
        amount=topup.amount,
        idempotency_key=f"topup-{topup.reference}",
        transaction_type=TransactionType.TOPUP,
        description=f"Nạp tiền {topup.reference}",
        reference_type="topup",
        reference_id=str(topup.id),
        performed_by=confirmed_by,
    )
    topup.status = TopupStatus.COMPLETED
    topup.payment_reference = payment_reference
    topup.completed_at = utc_now()
    await db.flush()
    logger.info("Top-up %s confirmed by %s", topup.reference, confirmed_by)
    return topup


async def fail_topup(db: AsyncSession, topup: WalletTopup, *, reason: str) -> WalletTopup:
    if topup.status != TopupStatus.PENDING:
        raise StateConflict(f"Top-up is already {topup.status.value}")
    topup.status = TopupStatus.FAILED
    topup.failed_at = utc_now()
    topup.failure_reason = reason
    await db.flush()
    return topup
