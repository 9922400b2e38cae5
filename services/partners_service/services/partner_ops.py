"""Partner onboarding and status management."""

import uuid
from typing import Optional

from libs.common.errors import StateConflict
from libs.common.logging import get_logger
from libs.db.audit import record_audit
from services.cups_service.models import PartnerStatus, PartnerType, Store
from services.cups_service.services.store_ops import get_store
from services.users_service.models import NotificationType
from services.users_service.services.profile_ops import notify
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def register_partner(
    db: AsyncSession,
    owner_auth_id: str,
    *,
    name: str,
    address: str,
    gps_lat: float,
    gps_lng: float,
    partner_type: PartnerType,
    contact_name: Optional[str] = None,
    contact_phone: Optional[str] = None,
    contact_email: Optional[str] = None,
    opening_hours: Optional[str] = None,
) -> Store:
    """Self-registration; the store stays ``pending`` until an admin approves it."""
    store = Store(
        name=name,
        address=address,
        gps_lat=gps_lat,
        gps_lng=gps_lng,
        partner_type=partner_type,
        partner_status=PartnerStatus.PENDING,
        owner_auth_id=owner_auth_id,
        contact_name=contact_name,
        contact_phone=contact_phone,
        contact_email=contact_email,
        opening_hours=opening_hours,
    )
    db.add(store)
    await db.flush()
    logger.info("Partner registration %s (%s) by %s", store.id, name, owner_auth_id)
    return store


async def set_partner_status(
    db: AsyncSession,
    store_id: uuid.UUID,
    target: PartnerStatus,
    *,
    performed_by: str,
    reason: Optional[str] = None,
) -> Store:
    store = await get_store(db, store_id)
    if store.partner_status == target:
        raise StateConflict(f"Partner is already {target.value}")
    if target == PartnerStatus.PENDING:
        raise StateConflict("Partners cannot be moved back to pending")

    old_status = store.partner_status
    store.partner_status = target
    await db.flush()

    await record_audit(
        db,
        entity_type="store",
        entity_id=store.id,
        action="approve" if target == PartnerStatus.ACTIVE else "pause",
        performed_by=performed_by,
        old_value={"partner_status": old_status.value},
        new_value={"partner_status": target.value},
        reason=reason,
    )
    if store.owner_auth_id:
        if target == PartnerStatus.ACTIVE:
            title, message = "Đối tác được duyệt", f"{store.name} đã được kích hoạt."
        else:
            title, message = "Đối tác tạm dừng", f"{store.name} đã bị tạm dừng."
        await notify(db, store.owner_auth_id, title, message, NotificationType.SYSTEM)
    logger.info(
        "Partner %s %s -> %s by %s", store.id, old_status.value, target.value, performed_by
    )
    return store
