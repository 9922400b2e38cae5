"""Member-facing borrow, return and history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.gamification import is_overdue, overdue_hours
from libs.common.qr import build_cup_payload
from libs.common.rate_limit import lifecycle_limit
from libs.db.session import atomic, get_async_db
from services.cups_service.models import (
    OPEN_STATUSES,
    CupStatus,
    CupTransaction,
    CupTransactionStatus,
    Store,
)
from services.cups_service.routers._helpers import resolve_cup_id
from services.cups_service.schemas import (
    BorrowedCupResponse,
    BorrowRequest,
    BorrowResponse,
    CupResponse,
    ReturnRequest,
    ReturnResponse,
    ScanRequest,
    ScanResponse,
    TransactionListResponse,
)
from services.cups_service.services.cup_ops import get_cup
from services.cups_service.services.lifecycle import (
    borrow_cup,
    mark_overdue_transactions,
    return_cup,
)
from services.users_service.services.profile_ops import get_or_create_profile
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/cups", tags=["cups"])


# ---------------------------------------------------------------------------
# QR
# ---------------------------------------------------------------------------


@router.post("/scan", response_model=ScanResponse)
async def scan_cup(
    body: ScanRequest,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Resolve a scanned QR code to a cup and tell whether it can be borrowed."""
    cup = await get_cup(db, resolve_cup_id(body.qr_code))
    store_name = None
    if cup.current_store_id:
        store_name = (
            await db.execute(select(Store.name).where(Store.id == cup.current_store_id))
        ).scalar_one_or_none()
    return ScanResponse(
        cup=CupResponse.model_validate(cup),
        payload=build_cup_payload(cup.id, cup.material.value),
        can_borrow=cup.status == CupStatus.AVAILABLE,
        store_name=store_name,
    )


# ---------------------------------------------------------------------------
# Borrow / return
# ---------------------------------------------------------------------------


@router.post("/borrow", response_model=BorrowResponse)
@lifecycle_limit
async def borrow(
    request: Request,
    body: BorrowRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cup_id = resolve_cup_id(body.cup_id)
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        result = await borrow_cup(db, profile, cup_id, body.store_id)
    txn = result.transaction
    return BorrowResponse(
        transaction_id=txn.id,
        cup_id=txn.cup_id,
        due_time=txn.due_time,
        deposit_amount=txn.deposit_amount,
        discount_amount=txn.discount_amount,
        balance=result.balance,
        message=result.message,
    )


@router.post("/return", response_model=ReturnResponse)
@lifecycle_limit
async def return_(
    request: Request,
    body: ReturnRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cup_id = resolve_cup_id(body.cup_id)
    async with atomic(db):
        profile = await get_or_create_profile(
            db, current_user.user_id, email=current_user.email
        )
        result = await return_cup(db, profile, cup_id, body.store_id)
    txn = result.transaction
    return ReturnResponse(
        transaction_id=txn.id,
        cup_id=txn.cup_id,
        points_earned=result.points_earned,
        late_fee=result.late_fee,
        refund_amount=result.refund,
        balance=result.balance,
        green_streak=result.green_streak,
        voucher_code=result.voucher.code if result.voucher else None,
        message=result.message,
    )


# ---------------------------------------------------------------------------
# My cups
# ---------------------------------------------------------------------------


@router.get("/borrowed", response_model=list[BorrowedCupResponse])
async def my_borrowed_cups(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Open borrows, with overdue status refreshed on read."""
    async with atomic(db):
        await mark_overdue_transactions(db, current_user.user_id)

    result = await db.execute(
        select(CupTransaction)
        .where(
            CupTransaction.auth_id == current_user.user_id,
            CupTransaction.status.in_(OPEN_STATUSES),
        )
        .order_by(CupTransaction.due_time)
    )
    now = utc_now()
    borrowed = []
    for txn in result.scalars().all():
        item = BorrowedCupResponse.model_validate(txn)
        item.is_overdue = is_overdue(txn.due_time, now)
        item.overdue_hours = overdue_hours(txn.due_time, now)
        borrowed.append(item)
    return borrowed


@router.get("/history", response_model=TransactionListResponse)
async def my_history(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    txn_status: Optional[CupTransactionStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [CupTransaction.auth_id == current_user.user_id]
    if txn_status:
        filters.append(CupTransaction.status == txn_status)

    total = (
        await db.execute(
            select(func.count()).select_from(CupTransaction).where(*filters)
        )
    ).scalar() or 0
    result = await db.execute(
        select(CupTransaction)
        .where(*filters)
        .order_by(desc(CupTransaction.borrow_time))
        .offset(skip)
        .limit(limit)
    )
    return TransactionListResponse(
        transactions=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )
