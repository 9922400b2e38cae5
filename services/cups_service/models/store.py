"""Partner locations where cups are borrowed and returned."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.cups_service.models.enums import PartnerStatus, PartnerType, enum_values
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Store(Base):
    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    gps_lat: Mapped[float] = mapped_column(Float, nullable=False)
    gps_lng: Mapped[float] = mapped_column(Float, nullable=False)
    partner_type: Mapped[PartnerType] = mapped_column(
        SAEnum(
            PartnerType,
            name="partner_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PartnerType.CAFE,
        nullable=False,
    )
    partner_status: Mapped[PartnerStatus] = mapped_column(
        SAEnum(
            PartnerStatus,
            name="partner_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PartnerStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Set when a partner registered the location themselves
    owner_auth_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    opening_hours: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Store {self.name} ({self.partner_status.value})>"
