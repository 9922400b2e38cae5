"""Admin store, cup inventory and transaction management."""

import csv
import io
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.errors import StateConflict
from libs.common.logging import get_logger
from libs.common.qr import build_cup_payload, render_png
from libs.db.audit import record_audit
from libs.db.session import atomic, get_async_db
from services.cups_service.models import (
    Cup,
    CupStatus,
    CupTransaction,
    CupTransactionStatus,
    PartnerStatus,
    Store,
)
from services.cups_service.routers._helpers import store_to_response
from services.cups_service.schemas import (
    BulkCupCreate,
    BulkCupResponse,
    CupListResponse,
    CupResponse,
    CupStatusUpdate,
    CupTransactionResponse,
    OverdueSweepResponse,
    StoreCreate,
    StoreResponse,
    StoreUpdate,
    TransactionListResponse,
    TransactionOverrideRequest,
)
from services.cups_service.services.cup_ops import (
    bulk_create_cups,
    get_cup,
    mark_cleaned,
    set_cup_status,
)
from services.cups_service.services.lifecycle import (
    admin_override_transaction,
    mark_overdue_transactions,
)
from services.cups_service.services.store_ops import get_store, store_inventory
from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/admin/cups", tags=["admin-cups"])
stores_router = APIRouter(prefix="/admin/stores", tags=["admin-stores"])


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@stores_router.get("", response_model=list[StoreResponse])
async def list_all_stores(
    partner_status: Optional[PartnerStatus] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(Store)
    if partner_status:
        query = query.where(Store.partner_status == partner_status)
    stores = list((await db.execute(query.order_by(Store.name))).scalars().all())
    inventory = await store_inventory(db, [store.id for store in stores])
    return [store_to_response(store, inventory[store.id]) for store in stores]


@stores_router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    body: StoreCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        store = Store(**body.model_dump())
        db.add(store)
        await db.flush()
    return store_to_response(store, {})


@stores_router.patch("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: uuid.UUID,
    body: StoreUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        store = await get_store(db, store_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(store, field, value)
        await db.flush()
    inventory = await store_inventory(db, [store.id])
    return store_to_response(store, inventory[store.id])


@stores_router.delete("/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_store(
    store_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove a store that never took part in a cup loan. Others can only be paused."""
    in_use = StateConflict(
        "Store has cups or history; pause it instead", code="store_in_use"
    )
    try:
        async with atomic(db):
            store = await get_store(db, store_id)
            held = await db.execute(
                select(func.count()).select_from(Cup).where(Cup.current_store_id == store.id)
            )
            loans = await db.execute(
                select(func.count())
                .select_from(CupTransaction)
                .where(
                    (CupTransaction.borrow_store_id == store.id)
                    | (CupTransaction.return_store_id == store.id)
                )
            )
            if held.scalar() or loans.scalar():
                raise in_use
            await record_audit(
                db,
                entity_type="store",
                entity_id=store.id,
                action="deleted",
                performed_by=admin.email or admin.user_id,
                old_value={"name": store.name, "partner_status": store.partner_status.value},
            )
            await db.delete(store)
            await db.flush()
    except IntegrityError:
        # Still referenced by contracts, orders or trips
        raise in_use from None
    logger.info("Deleted store %s", store_id)


# ---------------------------------------------------------------------------
# Cups
# ---------------------------------------------------------------------------


@router.get("", response_model=CupListResponse)
async def list_cups(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    cup_status: Optional[CupStatus] = Query(None, alias="status"),
    store_id: Optional[uuid.UUID] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if cup_status:
        filters.append(Cup.status == cup_status)
    if store_id:
        filters.append(Cup.current_store_id == store_id)

    total = (
        await db.execute(select(func.count()).select_from(Cup).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(Cup).where(*filters).order_by(Cup.id).offset(skip).limit(limit)
    )
    return CupListResponse(
        cups=list(result.scalars().all()), total=total, skip=skip, limit=limit
    )


@router.post("/bulk", response_model=BulkCupResponse, status_code=status.HTTP_201_CREATED)
async def create_cups(
    body: BulkCupCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a batch of cups with unique random 8-digit ids."""
    async with atomic(db):
        await get_store(db, body.store_id)
        cups = await bulk_create_cups(
            db, store_id=body.store_id, count=body.count, material=body.material
        )
    return BulkCupResponse(
        created=len(cups), cups=[CupResponse.model_validate(cup) for cup in cups]
    )


@router.get("/export")
async def export_cups(
    store_id: Optional[uuid.UUID] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """CSV of cups with their printable QR payloads."""
    query = select(Cup).order_by(Cup.id)
    if store_id:
        query = query.where(Cup.current_store_id == store_id)
    cups = (await db.execute(query)).scalars().all()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["cup_id", "material", "status", "store_id", "total_uses", "qr_payload"])
    for cup in cups:
        writer.writerow(
            [
                cup.id,
                cup.material.value,
                cup.status.value,
                str(cup.current_store_id or ""),
                cup.total_uses,
                build_cup_payload(cup.id, cup.material.value),
            ]
        )
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="cups.csv"'},
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    txn_status: Optional[CupTransactionStatus] = Query(None, alias="status"),
    auth_id: Optional[str] = None,
    store_id: Optional[uuid.UUID] = None,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        await mark_overdue_transactions(db)

    filters = []
    if txn_status:
        filters.append(CupTransaction.status == txn_status)
    if auth_id:
        filters.append(CupTransaction.auth_id == auth_id)
    if store_id:
        filters.append(CupTransaction.borrow_store_id == store_id)

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


@router.post("/transactions/overdue-sweep", response_model=OverdueSweepResponse)
async def sweep_overdue(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        marked = await mark_overdue_transactions(db)
    return OverdueSweepResponse(marked_overdue=marked)


@router.post(
    "/transactions/{transaction_id}/override", response_model=CupTransactionResponse
)
async def override_transaction(
    transaction_id: uuid.UUID,
    body: TransactionOverrideRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        txn = await admin_override_transaction(
            db,
            transaction_id,
            body.status,
            performed_by=admin.email or admin.user_id,
            reason=body.reason,
        )
    return txn


# ---------------------------------------------------------------------------
# Single cup
# ---------------------------------------------------------------------------


@router.get("/{cup_id}", response_model=CupResponse)
async def get_cup_detail(
    cup_id: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_cup(db, cup_id)


@router.get("/{cup_id}/qr")
async def cup_qr(
    cup_id: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Printable QR code PNG for a cup."""
    cup = await get_cup(db, cup_id)
    png = render_png(build_cup_payload(cup.id, cup.material.value))
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="cup-{cup.id}.png"'},
    )


@router.patch("/{cup_id}/status", response_model=CupResponse)
async def override_cup_status(
    cup_id: str,
    body: CupStatusUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    async with atomic(db):
        if body.store_id:
            await get_store(db, body.store_id)
        cup = await set_cup_status(
            db,
            cup_id,
            body.status,
            performed_by=admin.email or admin.user_id,
            reason=body.reason,
            store_id=body.store_id,
        )
    return cup


@router.post("/{cup_id}/clean", response_model=CupResponse)
async def clean_cup(
    cup_id: str,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Hygiene check passed: the cup goes back into circulation."""
    async with atomic(db):
        cup = await mark_cleaned(db, cup_id)
    return cup
