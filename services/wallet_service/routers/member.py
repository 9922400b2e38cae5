"""Member-facing wallet endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import NotFound
from libs.db.session import atomic, get_async_db
from services.wallet_service.models import WalletTopup, WalletTransaction
from services.wallet_service.schemas import (
    TopupInitiateRequest,
    TopupListResponse,
    TopupResponse,
    TransactionListResponse,
    WalletResponse,
)
from services.wallet_service.services.topup_ops import get_topup, initiate_topup
from services.wallet_service.services.wallet_ops import get_or_create_wallet
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/wallet", tags=["wallet"])


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


@router.get("/me", response_model=WalletResponse)
async def get_my_wallet(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get current user's wallet, creating an empty one on first access."""
    async with atomic(db):
        wallet = await get_or_create_wallet(db, current_user.user_id)
    return wallet


@router.get("/transactions", response_model=TransactionListResponse)
async def list_my_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Ledger entries for the current user's wallet, newest first."""
    async with atomic(db):
        wallet = await get_or_create_wallet(db, current_user.user_id)

    where = WalletTransaction.wallet_id == wallet.id
    total = (
        await db.execute(select(func.count()).select_from(WalletTransaction).where(where))
    ).scalar() or 0
    result = await db.execute(
        select(WalletTransaction)
        .where(where)
        .order_by(desc(WalletTransaction.created_at))
        .offset(skip)
        .limit(limit)
    )
    return TransactionListResponse(
        transactions=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


# ---------------------------------------------------------------------------
# Top-ups
# ---------------------------------------------------------------------------


@router.post("/topup", response_model=TopupResponse, status_code=status.HTTP_201_CREATED)
async def start_topup(
    body: TopupInitiateRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a pending top-up; the balance changes once payment is confirmed."""
    async with atomic(db):
        topup = await initiate_topup(
            db,
            auth_id=current_user.user_id,
            amount=body.amount,
            payment_method=body.payment_method,
        )
    return topup


@router.get("/topups", response_model=TopupListResponse)
async def list_my_topups(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    where = WalletTopup.auth_id == current_user.user_id
    total = (
        await db.execute(select(func.count()).select_from(WalletTopup).where(where))
    ).scalar() or 0
    result = await db.execute(
        select(WalletTopup)
        .where(where)
        .order_by(desc(WalletTopup.created_at))
        .offset(skip)
        .limit(limit)
    )
    return TopupListResponse(
        topups=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.get("/topup/{topup_id}", response_model=TopupResponse)
async def get_topup_status(
    topup_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    topup = await get_topup(db, topup_id)
    if topup.auth_id != current_user.user_id:
        raise NotFound("Top-up not found")
    return topup
