"""Borrow and return of cups.

Each operation checks its preconditions first, then applies conditional
updates and wallet movements in the caller's session. Nothing is committed
here: routers wrap a call in ``atomic(db)`` so a failure at any step leaves
no partial state behind.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from libs.common.config import get_settings
from libs.common.currency import format_vnd
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    BorrowLimitReached,
    CupNotAvailable,
    InsufficientBalance,
    NoActiveTransaction,
    NotFound,
    ValidationFailed,
)
from libs.common.gamification import (
    GamificationConfig,
    borrow_limit,
    compute_due_time,
    compute_late_fee,
    compute_refund,
    compute_return_points,
    compute_streak_voucher,
    get_gamification_config,
)
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from libs.db.session import conditional_update
from services.cups_service.models import (
    OPEN_STATUSES,
    Cup,
    CupStatus,
    CupTransaction,
    CupTransactionStatus,
)
from services.cups_service.services.cup_ops import get_cup
from services.cups_service.services.store_ops import get_active_store
from services.rewards_service.models import RequirementType, Voucher
from services.rewards_service.services.challenge_ops import record_progress
from services.rewards_service.services.reward_ops import issue_streak_voucher
from services.users_service.models import NotificationType, PointSource, UserProfile
from services.users_service.services.profile_ops import (
    award_points,
    ensure_not_blacklisted,
    notify,
    register_return,
    reset_streak,
)
from services.wallet_service.models import TransactionType
from services.wallet_service.services.wallet_ops import (
    check_balance,
    credit_wallet,
    debit_wallet,
    get_wallet_by_auth_id,
)
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class BorrowResult:
    transaction: CupTransaction
    balance: int
    message: str


@dataclass
class ReturnResult:
    transaction: CupTransaction
    points_earned: int
    late_fee: int
    refund: int
    balance: int
    green_streak: int
    voucher: Optional[Voucher]
    message: str


async def count_open_borrows(db: AsyncSession, auth_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(CupTransaction)
        .where(
            CupTransaction.auth_id == auth_id,
            CupTransaction.status.in_(OPEN_STATUSES),
        )
    )
    return result.scalar() or 0


# ---------------------------------------------------------------------------
# Borrow
# ---------------------------------------------------------------------------


async def borrow_cup(
    db: AsyncSession,
    profile: UserProfile,
    cup_id: str,
    store_id: uuid.UUID,
    config: Optional[GamificationConfig] = None,
) -> BorrowResult:
    config = config or get_gamification_config()
    auth_id = profile.auth_id

    ensure_not_blacklisted(profile)
    cup = await get_cup(db, cup_id)
    if cup.status != CupStatus.AVAILABLE:
        raise CupNotAvailable("Ly này hiện không có sẵn để mượn")
    await get_active_store(db, store_id)

    limit = borrow_limit(profile.rank_level)
    if await count_open_borrows(db, auth_id) >= limit:
        raise BorrowLimitReached(
            f"Bạn chỉ được mượn tối đa {limit} ly cùng lúc",
            extra={"limit": limit},
        )

    sufficient, balance = await check_balance(db, auth_id, config.deposit_amount)
    if not sufficient:
        raise InsufficientBalance(
            f"Số dư không đủ. Cần {format_vnd(config.deposit_amount)}, "
            f"hiện có {format_vnd(balance)}.",
            extra={"required": config.deposit_amount, "balance": balance},
        )

    now = utc_now()
    txn = CupTransaction(
        id=uuid.uuid4(),
        auth_id=auth_id,
        cup_id=cup.id,
        borrow_store_id=store_id,
        status=CupTransactionStatus.ONGOING,
        borrow_time=now,
        due_time=compute_due_time(now, config),
        deposit_amount=config.deposit_amount,
        discount_amount=config.borrow_discount,
    )

    claimed = await conditional_update(
        db,
        Cup,
        Cup.id == cup.id,
        Cup.status == CupStatus.AVAILABLE,
        status=CupStatus.IN_USE,
        current_transaction_id=txn.id,
        current_store_id=None,
    )
    if not claimed:
        raise CupNotAvailable("Ly này vừa được người khác mượn")
    await db.refresh(cup)

    db.add(txn)
    await db.flush()

    await debit_wallet(
        db,
        auth_id=auth_id,
        amount=config.deposit_amount,
        idempotency_key=f"cup-deposit-{txn.id}",
        transaction_type=TransactionType.CUP_DEPOSIT,
        description=f"Đặt cọc ly {cup.id}",
        reference_type="cup_transaction",
        reference_id=str(txn.id),
    )
    if config.borrow_discount > 0:
        await credit_wallet(
            db,
            auth_id=auth_id,
            amount=config.borrow_discount,
            idempotency_key=f"cup-discount-{txn.id}",
            transaction_type=TransactionType.BORROW_DISCOUNT,
            description=f"Giảm giá đồ uống khi mượn ly {cup.id}",
            reference_type="cup_transaction",
            reference_id=str(txn.id),
        )

    await record_progress(db, auth_id, RequirementType.CUPS)
    await notify(
        db,
        auth_id,
        "Mượn ly thành công",
        f"Bạn đã mượn ly {cup.id}. Vui lòng trả trước "
        f"{txn.due_time:%H:%M %d/%m/%Y} (UTC).",
        NotificationType.BORROW,
    )

    wallet = await get_wallet_by_auth_id(db, auth_id)
    logger.info("User %s borrowed cup %s at store %s (txn=%s)", auth_id, cup.id, store_id, txn.id)
    return BorrowResult(
        transaction=txn,
        balance=wallet.balance,
        message=(
            f"Mượn ly thành công! Đã trừ cọc {format_vnd(config.deposit_amount)} "
            f"và hoàn {format_vnd(config.borrow_discount)} giảm giá."
        ),
    )


# ---------------------------------------------------------------------------
# Return
# ---------------------------------------------------------------------------


async def return_cup(
    db: AsyncSession,
    profile: UserProfile,
    cup_id: str,
    store_id: uuid.UUID,
    config: Optional[GamificationConfig] = None,
) -> ReturnResult:
    config = config or get_gamification_config()
    auth_id = profile.auth_id

    cup = await get_cup(db, cup_id)
    await get_active_store(db, store_id)

    result = await db.execute(
        select(CupTransaction).where(
            CupTransaction.cup_id == cup.id,
            CupTransaction.auth_id == auth_id,
            CupTransaction.status.in_(OPEN_STATUSES),
        )
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NoActiveTransaction("Không tìm thấy giao dịch mượn ly đang hoạt động")

    now = utc_now()
    late_fee = compute_late_fee(txn.due_time, now, config)
    refund = compute_refund(txn.deposit_amount, late_fee)
    points = compute_return_points(txn.borrow_time, now, txn.due_time, config)
    on_time = late_fee == 0

    closed = await conditional_update(
        db,
        CupTransaction,
        CupTransaction.id == txn.id,
        CupTransaction.status.in_(OPEN_STATUSES),
        status=CupTransactionStatus.COMPLETED,
        return_time=now,
        return_store_id=store_id,
        late_fee=late_fee,
        refund_amount=refund,
        points_earned=points,
    )
    await db.refresh(txn)
    if not closed:
        raise NoActiveTransaction("Giao dịch đã được xử lý")

    target = CupStatus.CLEANING if get_settings().RETURN_TO_CLEANING else CupStatus.AVAILABLE
    released = await conditional_update(
        db,
        Cup,
        Cup.id == cup.id,
        Cup.status == CupStatus.IN_USE,
        status=target,
        total_uses=Cup.total_uses + 1,
        current_store_id=store_id,
        current_transaction_id=None,
    )
    await db.refresh(cup)
    if not released:
        raise CupNotAvailable("Ly không ở trạng thái đang được mượn")

    if refund > 0:
        await credit_wallet(
            db,
            auth_id=auth_id,
            amount=refund,
            idempotency_key=f"cup-refund-{txn.id}",
            transaction_type=TransactionType.DEPOSIT_REFUND,
            description=f"Hoàn cọc ly {cup.id}",
            reference_type="cup_transaction",
            reference_id=str(txn.id),
            details={"late_fee": late_fee} if late_fee else None,
        )

    await award_points(
        db,
        profile,
        points,
        source=PointSource.CUP_RETURN,
        description=f"Trả ly {cup.id}",
        reference_id=str(txn.id),
    )
    profile.last_return_at = now
    streak = await register_return(db, profile, on_time=on_time)

    voucher = None
    streak_voucher = compute_streak_voucher(streak, config)
    if streak_voucher:
        voucher = await issue_streak_voucher(db, auth_id, streak_voucher)
        await reset_streak(db, profile)
    await db.flush()

    await record_progress(db, auth_id, RequirementType.POINTS, points)
    if on_time:
        await record_progress(db, auth_id, RequirementType.STREAK)

    if late_fee:
        message = (
            f"Trả ly trễ hạn. Phí trễ {format_vnd(late_fee)}, "
            f"hoàn {format_vnd(refund)}. +{points} điểm xanh."
        )
    else:
        message = f"Trả ly thành công! Hoàn cọc {format_vnd(refund)}. +{points} điểm xanh."
    await notify(db, auth_id, "Trả ly thành công", message, NotificationType.RETURN)

    wallet = await get_wallet_by_auth_id(db, auth_id)
    logger.info(
        "User %s returned cup %s at store %s (txn=%s, fee=%d, points=%d)",
        auth_id,
        cup.id,
        store_id,
        txn.id,
        late_fee,
        points,
    )
    return ReturnResult(
        transaction=txn,
        points_earned=points,
        late_fee=late_fee,
        refund=refund,
        balance=wallet.balance,
        green_streak=profile.green_streak,
        voucher=voucher,
        message=message,
    )


# ---------------------------------------------------------------------------
# Overdue detection
# ---------------------------------------------------------------------------


async def mark_overdue_transactions(
    db: AsyncSession, auth_id: Optional[str] = None
) -> int:
    """Flip ``ongoing`` transactions past their due time to ``overdue``."""
    query = update(CupTransaction).where(
        CupTransaction.status == CupTransactionStatus.ONGOING,
        CupTransaction.due_time < utc_now(),
    )
    if auth_id is not None:
        query = query.where(CupTransaction.auth_id == auth_id)
    result = await db.execute(
        query.values(status=CupTransactionStatus.OVERDUE).execution_options(
            synchronize_session=False
        )
    )
    marked = result.rowcount or 0
    if marked:
        logger.info("Marked %d cup transactions overdue", marked)
    return marked


# ---------------------------------------------------------------------------
# Admin override
# ---------------------------------------------------------------------------


async def admin_override_transaction(
    db: AsyncSession,
    transaction_id: uuid.UUID,
    target: CupTransactionStatus,
    *,
    performed_by: str,
    reason: Optional[str] = None,
) -> CupTransaction:
    """Force a transaction closed. Open transactions get a full deposit refund."""
    if target not in (CupTransactionStatus.COMPLETED, CupTransactionStatus.CANCELLED):
        raise ValidationFailed("Override target must be completed or cancelled")

    result = await db.execute(
        select(CupTransaction).where(CupTransaction.id == transaction_id)
    )
    txn = result.scalar_one_or_none()
    if not txn:
        raise NotFound("Transaction not found")

    old_status = txn.status
    was_open = old_status in OPEN_STATUSES
    now = utc_now()

    if was_open:
        txn.return_time = now
        txn.late_fee = 0
        txn.refund_amount = txn.deposit_amount
        await credit_wallet(
            db,
            auth_id=txn.auth_id,
            amount=txn.deposit_amount,
            idempotency_key=f"cup-refund-{txn.id}",
            transaction_type=TransactionType.DEPOSIT_REFUND,
            description=f"Hoàn cọc ly {txn.cup_id} (quản trị viên)",
            reference_type="cup_transaction",
            reference_id=str(txn.id),
            performed_by=performed_by,
        )

        cup = await get_cup(db, txn.cup_id)
        if cup.current_transaction_id == txn.id:
            cup.status = (
                CupStatus.CLEANING
                if target == CupTransactionStatus.COMPLETED
                else CupStatus.AVAILABLE
            )
            cup.current_transaction_id = None
            cup.current_store_id = txn.borrow_store_id

        await notify(
            db,
            txn.auth_id,
            "Giao dịch mượn ly đã được cập nhật",
            f"Quản trị viên đã đóng giao dịch ly {txn.cup_id}. "
            f"Tiền cọc {format_vnd(txn.deposit_amount)} đã được hoàn.",
            NotificationType.SYSTEM,
        )

    txn.status = target
    if reason:
        txn.notes = reason
    await db.flush()

    await record_audit(
        db,
        entity_type="cup_transaction",
        entity_id=txn.id,
        action="override",
        performed_by=performed_by,
        old_value={"status": old_status.value},
        new_value={"status": target.value, "refunded": txn.deposit_amount if was_open else 0},
        reason=reason,
    )
    logger.info(
        "Admin %s overrode cup transaction %s: %s -> %s",
        performed_by,
        txn.id,
        old_status.value,
        target.value,
    )
    return txn
