"""Wallet ledger operations.

Every balance change is one ``WalletTransaction`` row carrying the balance
before and after. Postings are keyed: replaying an ``idempotency_key``
returns the original row and moves no money, so a retried borrow or return
never double-charges.

Nothing here commits. Callers run postings inside ``libs.db.session.atomic``
together with the rest of their mutation.
"""

from typing import Optional

from libs.common.currency import format_vnd
from libs.common.errors import InsufficientBalance, NotFound, StateConflict
from libs.common.logging import get_logger
from services.wallet_service.models import (
    TransactionDirection,
    TransactionType,
    Wallet,
    WalletStatus,
    WalletTransaction,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_or_create_wallet(db: AsyncSession, auth_id: str) -> Wallet:
    """Return the user's wallet, opening an empty one on first use."""
    result = await db.execute(select(Wallet).where(Wallet.auth_id == auth_id))
    wallet = result.scalar_one_or_none()
    if wallet is None:
        wallet = Wallet(auth_id=auth_id, balance=0, status=WalletStatus.ACTIVE)
        db.add(wallet)
        await db.flush()
        logger.info("Opened wallet %s for %s", wallet.id, auth_id)
    return wallet


async def get_wallet_by_auth_id(db: AsyncSession, auth_id: str) -> Wallet:
    result = await db.execute(select(Wallet).where(Wallet.auth_id == auth_id))
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise NotFound("Wallet not found")
    return wallet


async def check_balance(
    db: AsyncSession, auth_id: str, required_amount: int
) -> tuple[bool, int]:
    """``(sufficient, balance)`` without locking; a missing wallet reads as 0."""
    result = await db.execute(select(Wallet.balance).where(Wallet.auth_id == auth_id))
    balance = result.scalar_one_or_none() or 0
    return balance >= required_amount, balance


async def _locked_wallet(db: AsyncSession, auth_id: str) -> Wallet:
    # populate_existing refreshes a stale identity-map copy with the locked row
    await db.flush()
    result = await db.execute(
        select(Wallet)
        .where(Wallet.auth_id == auth_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    wallet = result.scalar_one_or_none()
    if not wallet:
        raise NotFound("Wallet not found")
    return wallet


def _apply_counters(
    wallet: Wallet, direction: TransactionDirection, kind: TransactionType, amount: int
) -> None:
    if direction == TransactionDirection.DEBIT:
        wallet.balance -= amount
        wallet.lifetime_spent += amount
        return
    wallet.balance += amount
    if kind == TransactionType.TOPUP:
        wallet.lifetime_topped_up += amount
    else:
        wallet.lifetime_received += amount


async def post_entry(
    db: AsyncSession,
    *,
    auth_id: str,
    direction: TransactionDirection,
    amount: int,
    idempotency_key: str,
    transaction_type: TransactionType,
    description: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
    performed_by: Optional[str] = None,
    details: Optional[dict] = None,
) -> WalletTransaction:
    """Post one ledger entry and move the balance under a row lock.

    Debits need an active wallet with enough balance. Credits always land,
    so refunds still reach a frozen wallet.
    """
    replay = await db.execute(
        select(WalletTransaction).where(WalletTransaction.idempotency_key == idempotency_key)
    )
    existing = replay.scalar_one_or_none()
    if existing:
        logger.info("Replayed ledger key %s -> %s", idempotency_key, existing.id)
        return existing

    wallet = await _locked_wallet(db, auth_id)
    if direction == TransactionDirection.DEBIT:
        if wallet.status != WalletStatus.ACTIVE:
            raise StateConflict("Ví đang bị tạm khóa", code="wallet_frozen")
        if wallet.balance < amount:
            raise InsufficientBalance(
                f"Số dư không đủ. Cần {format_vnd(amount)}, hiện có {format_vnd(wallet.balance)}.",
                extra={"required": amount, "balance": wallet.balance},
            )

    before = wallet.balance
    _apply_counters(wallet, direction, transaction_type, amount)
    entry = WalletTransaction(
        wallet_id=wallet.id,
        idempotency_key=idempotency_key,
        transaction_type=transaction_type,
        direction=direction,
        amount=amount,
        balance_before=before,
        balance_after=wallet.balance,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        performed_by=performed_by,
        details=details,
    )
    db.add(entry)
    await db.flush()

    logger.info(
        "%s %s %d on wallet %s (%s): %d -> %d",
        transaction_type.value,
        direction.value,
        amount,
        wallet.id,
        idempotency_key,
        before,
        wallet.balance,
    )
    return entry


async def debit_wallet(db: AsyncSession, **posting) -> WalletTransaction:
    return await post_entry(db, direction=TransactionDirection.DEBIT, **posting)


async def credit_wallet(db: AsyncSession, **posting) -> WalletTransaction:
    return await post_entry(db, direction=TransactionDirection.CREDIT, **posting)
