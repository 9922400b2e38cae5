"""Public store directory."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.cups_service.models import PartnerStatus, PartnerType, Store
from services.cups_service.routers._helpers import store_to_response
from services.cups_service.schemas import StoreResponse
from services.cups_service.services.store_ops import get_store, store_inventory
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("", response_model=list[StoreResponse])
async def list_stores(
    partner_type: Optional[PartnerType] = None,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Active partner stores with live cup inventory."""
    query = select(Store).where(Store.partner_status == PartnerStatus.ACTIVE)
    if partner_type:
        query = query.where(Store.partner_type == partner_type)
    stores = list((await db.execute(query.order_by(Store.name))).scalars().all())
    inventory = await store_inventory(db, [store.id for store in stores])
    return [store_to_response(store, inventory[store.id]) for store in stores]


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store_detail(
    store_id: uuid.UUID,
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    store = await get_store(db, store_id)
    inventory = await store_inventory(db, [store.id])
    return store_to_response(store, inventory[store.id])
