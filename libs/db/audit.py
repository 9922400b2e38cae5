"""Audit trail for admin actions that bypass normal preconditions."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.base import Base
from libs.db.types import JSONType, UTCDateTime

logger = get_logger(__name__)


class AuditLog(Base):
    """Tracks sensitive admin operations across services."""

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    entity_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    performed_by: Mapped[str] = mapped_column(String, nullable=False)
    old_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    new_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.entity_type}:{self.entity_id} {self.action}>"


async def record_audit(
    db: AsyncSession,
    *,
    entity_type: str,
    entity_id,
    action: str,
    performed_by: str,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
    reason: Optional[str] = None,
) -> AuditLog:
    """Add an audit row to the current unit of work (not committed here)."""
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        performed_by=performed_by,
        old_value=old_value,
        new_value=new_value,
        reason=reason,
    )
    db.add(entry)
    await db.flush()
    logger.info(
        "Audit %s %s:%s by %s", action, entity_type, entity_id, performed_by
    )
    return entry
