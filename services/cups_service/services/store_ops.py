"""Store lookups and derived cup inventory."""

import uuid
from collections.abc import Iterable

from libs.common.errors import NotFound, StateConflict
from services.cups_service.models import Cup, CupStatus, PartnerStatus, Store
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def get_store(db: AsyncSession, store_id: uuid.UUID) -> Store:
    result = await db.execute(select(Store).where(Store.id == store_id))
    store = result.scalar_one_or_none()
    if not store:
        raise NotFound("Store not found")
    return store


async def get_active_store(db: AsyncSession, store_id: uuid.UUID) -> Store:
    store = await get_store(db, store_id)
    if store.partner_status != PartnerStatus.ACTIVE:
        raise StateConflict(
            "Cửa hàng hiện không hoạt động", code="store_inactive"
        )
    return store


async def store_inventory(
    db: AsyncSession, store_ids: Iterable[uuid.UUID]
) -> dict[uuid.UUID, dict[str, int]]:
    """Cup counts per status for cups currently located at each store."""
    ids = list(store_ids)
    inventory: dict[uuid.UUID, dict[str, int]] = {
        store_id: {status.value: 0 for status in CupStatus} for store_id in ids
    }
    if not ids:
        return inventory

    result = await db.execute(
        select(Cup.current_store_id, Cup.status, func.count())
        .where(Cup.current_store_id.in_(ids))
        .group_by(Cup.current_store_id, Cup.status)
    )
    for store_id, status, count in result.all():
        inventory[store_id][status.value] = count
    return inventory


async def available_cups(db: AsyncSession, store_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Cup)
        .where(Cup.current_store_id == store_id, Cup.status == CupStatus.AVAILABLE)
    )
    return result.scalar() or 0
