"""Cup redistribution between stores.

Recommendations pair every low-stock store with its nearest overstocked one
(great-circle distance). Completing an order moves ``available`` cups from
the source to the destination store.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, StateConflict, ValidationFailed
from libs.common.lifecycle import ensure_transition
from libs.common.logging import get_logger
from services.cups_service.models import Cup, CupStatus, PartnerStatus, Store
from services.cups_service.services.store_ops import get_store
from services.partners_service.models import (
    OrderPriority,
    RedistributionOrder,
    RedistributionStatus,
)
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

LOW_STOCK_BELOW = 10
EXCESS_STOCK_ABOVE = 50
SOURCE_KEEPS = 30
MAX_TRANSFER = 20
HIGH_PRIORITY_ABOVE = 10

EARTH_RADIUS_KM = 6371


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class StoreStock:
    store: Store
    available: int


@dataclass(frozen=True)
class Recommendation:
    from_store: Store
    to_store: Store
    quantity: int
    distance_km: float
    priority: OrderPriority


async def _active_store_stock(db: AsyncSession) -> list[StoreStock]:
    counts = (
        select(Cup.current_store_id.label("store_id"), func.count().label("available"))
        .where(Cup.status == CupStatus.AVAILABLE)
        .group_by(Cup.current_store_id)
        .subquery()
    )
    result = await db.execute(
        select(Store, func.coalesce(counts.c.available, 0))
        .outerjoin(counts, counts.c.store_id == Store.id)
        .where(Store.partner_status == PartnerStatus.ACTIVE)
    )
    return [StoreStock(store=store, available=available) for store, available in result.all()]


def plan_redistribution(stock: list[StoreStock]) -> list[Recommendation]:
    """Pure planning step over a stock snapshot; high priority first."""
    low = [s for s in stock if s.available < LOW_STOCK_BELOW]
    excess = [s for s in stock if s.available > EXCESS_STOCK_ABOVE]

    recommendations = []
    for dest in low:
        best: Optional[StoreStock] = None
        best_distance = math.inf
        for source in excess:
            if source.store.id == dest.store.id:
                continue
            distance = haversine_km(
                source.store.gps_lat, source.store.gps_lng, dest.store.gps_lat, dest.store.gps_lng
            )
            if distance < best_distance:
                best, best_distance = source, distance
        if best is None:
            continue
        quantity = min(MAX_TRANSFER, best.available - SOURCE_KEEPS)
        if quantity <= 0:
            continue
        recommendations.append(
            Recommendation(
                from_store=best.store,
                to_store=dest.store,
                quantity=quantity,
                distance_km=round(best_distance, 1),
                priority=(
                    OrderPriority.HIGH if quantity > HIGH_PRIORITY_ABOVE else OrderPriority.MEDIUM
                ),
            )
        )
    recommendations.sort(key=lambda r: r.priority != OrderPriority.HIGH)
    return recommendations


async def recommend_redistribution(db: AsyncSession) -> list[Recommendation]:
    return plan_redistribution(await _active_store_stock(db))


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> RedistributionOrder:
    result = await db.execute(
        select(RedistributionOrder).where(RedistributionOrder.id == order_id)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFound("Redistribution order not found")
    return order


async def create_order(
    db: AsyncSession,
    *,
    to_store_id: uuid.UUID,
    quantity: int,
    from_store_id: Optional[uuid.UUID] = None,
    priority: OrderPriority = OrderPriority.MEDIUM,
    requested_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> RedistributionOrder:
    if from_store_id is not None and from_store_id == to_store_id:
        raise ValidationFailed("Source and destination stores must differ")
    await get_store(db, to_store_id)
    if from_store_id is not None:
        await get_store(db, from_store_id)

    order = RedistributionOrder(
        from_store_id=from_store_id,
        to_store_id=to_store_id,
        quantity=quantity,
        priority=priority,
        status=RedistributionStatus.PENDING,
        requested_by=requested_by,
        notes=notes,
    )
    db.add(order)
    await db.flush()
    logger.info(
        "Redistribution order %s: %d cups %s -> %s",
        order.id,
        quantity,
        from_store_id or "hub",
        to_store_id,
    )
    return order


async def advance_order(
    db: AsyncSession, order_id: uuid.UUID, target: RedistributionStatus
) -> RedistributionOrder:
    """Move an order along ``pending -> in_transit -> completed`` (or cancel it)."""
    order = await get_order(db, order_id)
    ensure_transition("redistribution", order.status, target)

    now = utc_now()
    if target == RedistributionStatus.IN_TRANSIT:
        if order.from_store_id is None:
            raise ValidationFailed("Assign a source store before dispatching")
        order.dispatched_at = now
    elif target == RedistributionStatus.COMPLETED:
        moved = await _move_available_cups(
            db, order.from_store_id, order.to_store_id, order.quantity
        )
        if moved < order.quantity:
            raise StateConflict(
                f"Only {moved} available cups at the source store",
                code="insufficient_cups",
                extra={"available": moved, "required": order.quantity},
            )
        order.completed_at = now

    order.status = target
    await db.flush()
    logger.info("Redistribution order %s -> %s", order.id, target.value)
    return order


async def _move_available_cups(
    db: AsyncSession, from_store_id: uuid.UUID, to_store_id: uuid.UUID, quantity: int
) -> int:
    result = await db.execute(
        select(Cup.id)
        .where(Cup.current_store_id == from_store_id, Cup.status == CupStatus.AVAILABLE)
        .order_by(Cup.id)
        .limit(quantity)
    )
    cup_ids = list(result.scalars().all())
    if len(cup_ids) < quantity:
        return len(cup_ids)

    moved = await db.execute(
        update(Cup)
        .where(
            Cup.id.in_(cup_ids),
            Cup.current_store_id == from_store_id,
            Cup.status == CupStatus.AVAILABLE,
        )
        .values(current_store_id=to_store_id)
        .execution_options(synchronize_session=False)
    )
    return moved.rowcount or 0
