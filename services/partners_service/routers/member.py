"""Partner self-service: registration, own stores and cup requests."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import PermissionDenied, StateConflict
from libs.db.session import atomic, get_async_db
from services.cups_service.models import PartnerStatus, Store
from services.cups_service.routers._helpers import store_to_response
from services.cups_service.schemas import StoreResponse
from services.cups_service.services.store_ops import get_store, store_inventory
from services.partners_service.models import OrderPriority, RedistributionOrder
from services.partners_service.schemas import (
    CupRequestCreate,
    OrderResponse,
    PartnerRegisterRequest,
)
from services.partners_service.services.partner_ops import register_partner
from services.partners_service.services.redistribution_ops import create_order
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/partners", tags=["partners"])


@router.post("/register", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: PartnerRegisterRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Register a new partner store; it stays pending until approved."""
    async with atomic(db):
        store = await register_partner(db, current_user.user_id, **body.model_dump())
    return store_to_response(store, {})


@router.get("/me/stores", response_model=list[StoreResponse])
async def my_stores(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Store).where(Store.owner_auth_id == current_user.user_id).order_by(Store.name)
    )
    stores = list(result.scalars().all())
    inventory = await store_inventory(db, [store.id for store in stores])
    return [store_to_response(store, inventory[store.id]) for store in stores]


@router.post(
    "/me/cup-requests", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
async def request_cups(
    body: CupRequestCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Ask the central hub for cups; admins pick a source store later."""
    async with atomic(db):
        store = await get_store(db, body.store_id)
        if store.owner_auth_id != current_user.user_id:
            raise PermissionDenied("You do not own this store")
        if store.partner_status != PartnerStatus.ACTIVE:
            raise StateConflict("Store is not an active partner", code="store_inactive")
        order = await create_order(
            db,
            to_store_id=store.id,
            quantity=body.quantity,
            priority=OrderPriority.MEDIUM,
            requested_by=current_user.user_id,
            notes=body.notes,
        )
    return order


@router.get("/me/cup-requests", response_model=list[OrderResponse])
async def my_cup_requests(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(RedistributionOrder)
        .where(RedistributionOrder.requested_by == current_user.user_id)
        .order_by(desc(RedistributionOrder.created_at))
    )
    return result.scalars().all()
