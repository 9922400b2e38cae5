"""Cup inventory administration: creation, status overrides and hygiene."""

import random
import uuid
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound, StateConflict, UpstreamError
from libs.common.lifecycle import ensure_transition
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from libs.db.session import conditional_update
from services.cups_service.models import Cup, CupMaterial, CupStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CUP_ID_MIN = 10_000_000
CUP_ID_MAX = 99_999_999
MAX_ID_ATTEMPTS = 100


async def get_cup(db: AsyncSession, cup_id: str) -> Cup:
    result = await db.execute(select(Cup).where(Cup.id == cup_id))
    cup = result.scalar_one_or_none()
    if not cup:
        raise NotFound("Không tìm thấy ly")
    return cup


async def generate_cup_id(
    db: AsyncSession, rng: Optional[random.Random] = None, reserved: Optional[set] = None
) -> str:
    """Draw a random unused 8-digit id."""
    rng = rng or random.SystemRandom()
    reserved = reserved if reserved is not None else set()
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = str(rng.randint(CUP_ID_MIN, CUP_ID_MAX))
        if candidate in reserved:
            continue
        taken = await db.execute(select(Cup.id).where(Cup.id == candidate))
        if taken.scalar_one_or_none() is None:
            return candidate
    raise UpstreamError("Could not allocate a unique cup id")


async def bulk_create_cups(
    db: AsyncSession,
    *,
    store_id: uuid.UUID,
    count: int,
    material: CupMaterial,
    rng: Optional[random.Random] = None,
) -> list[Cup]:
    """Create ``count`` available cups located at ``store_id``."""
    reserved: set[str] = set()
    cups = []
    for _ in range(count):
        cup_id = await generate_cup_id(db, rng, reserved)
        reserved.add(cup_id)
        cup = Cup(
            id=cup_id,
            material=material,
            status=CupStatus.AVAILABLE,
            current_store_id=store_id,
        )
        db.add(cup)
        cups.append(cup)
    await db.flush()
    logger.info("Created %d %s cups at store %s", count, material.value, store_id)
    return cups


async def set_cup_status(
    db: AsyncSession,
    cup_id: str,
    target: CupStatus,
    *,
    performed_by: str,
    reason: Optional[str] = None,
    store_id: Optional[uuid.UUID] = None,
) -> Cup:
    """Admin status override. Borrowed cups are released through their transaction."""
    cup = await get_cup(db, cup_id)
    if cup.current_transaction_id is not None and target != CupStatus.LOST:
        raise StateConflict(
            "Cup has an open transaction; override the transaction instead",
            code="cup_in_use",
        )
    ensure_transition("cup", cup.status, target)

    old_status = cup.status
    cup.status = target
    if store_id is not None:
        cup.current_store_id = store_id
    if target == CupStatus.AVAILABLE and old_status == CupStatus.CLEANING:
        cup.last_cleaned_at = utc_now()
    await db.flush()

    await record_audit(
        db,
        entity_type="cup",
        entity_id=cup.id,
        action="status_override",
        performed_by=performed_by,
        old_value={"status": old_status.value},
        new_value={"status": target.value},
        reason=reason,
    )
    return cup


async def mark_cleaned(db: AsyncSession, cup_id: str) -> Cup:
    """Hygiene step: ``cleaning -> available``."""
    cup = await get_cup(db, cup_id)
    ensure_transition("cup", cup.status, CupStatus.AVAILABLE)
    if cup.status != CupStatus.CLEANING:
        raise StateConflict("Cup is not waiting for cleaning", code="cup_not_cleaning")

    updated = await conditional_update(
        db,
        Cup,
        Cup.id == cup.id,
        Cup.status == CupStatus.CLEANING,
        status=CupStatus.AVAILABLE,
        last_cleaned_at=utc_now(),
    )
    await db.refresh(cup)
    if not updated:
        raise StateConflict("Cup is not waiting for cleaning", code="cup_not_cleaning")
    logger.info("Cup %s cleaned and available", cup.id)
    return cup
