"""Pay-per-ride public transport trips."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.mobility_service.models.enums import TripType, enum_values
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class GreenTrip(Base):
    __tablename__ = "green_trips"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    partner_store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=False, index=True
    )
    trip_type: Mapped[TripType] = mapped_column(
        SAEnum(
            TripType,
            name="trip_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    origin: Mapped[str] = mapped_column(String(200), nullable=False)
    destination: Mapped[str] = mapped_column(String(200), nullable=False)
    route_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    vehicle_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    distance_km: Mapped[float] = mapped_column(Float, nullable=False)
    fare: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_commission: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    partner_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    co2_saved_kg: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("fare > 0", name="ck_trip_fare_positive"),
        CheckConstraint("distance_km > 0", name="ck_trip_distance_positive"),
    )
