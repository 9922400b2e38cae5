"""E-bike stations, bikes and rentals."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.mobility_service.models.enums import BikeStatus, RentalStatus, enum_values
from sqlalchemy import Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column


class EbikeStation(Base):
    __tablename__ = "ebike_stations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    gps_lat: Mapped[float] = mapped_column(Float, nullable=False)
    gps_lng: Mapped[float] = mapped_column(Float, nullable=False)
    total_slots: Mapped[int] = mapped_column(Integer, nullable=False)

    # Solar canopy telemetry, pushed by the station controller
    solar_panel_capacity_kw: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    solar_energy_today_kwh: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    solar_energy_total_kwh: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    battery_storage_percent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    telemetry_updated_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("total_slots > 0", name="ck_station_slots_positive"),
        CheckConstraint(
            "battery_storage_percent >= 0 AND battery_storage_percent <= 100",
            name="ck_station_battery_range",
        ),
    )


class Ebike(Base):
    __tablename__ = "ebikes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bike_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    station_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("ebike_stations.id"), nullable=True, index=True
    )
    battery_level: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    status: Mapped[BikeStatus] = mapped_column(
        SAEnum(
            BikeStatus,
            name="bike_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=BikeStatus.AVAILABLE,
        nullable=False,
        index=True,
    )
    total_km: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "battery_level >= 0 AND battery_level <= 100", name="ck_bike_battery_range"
        ),
    )


class EbikeRental(Base):
    __tablename__ = "ebike_rentals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    bike_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ebikes.id"), nullable=False, index=True
    )
    start_station_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ebike_stations.id"), nullable=False
    )
    end_station_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("ebike_stations.id"), nullable=True
    )
    status: Mapped[RentalStatus] = mapped_column(
        SAEnum(
            RentalStatus,
            name="rental_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RentalStatus.REQUESTED,
        nullable=False,
        index=True,
    )
    planned_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    fare: Mapped[int] = mapped_column(Integer, nullable=False)
    platform_commission: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    partner_amount: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    start_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    distance_km: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    co2_saved_kg: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("fare >= 0", name="ck_rental_fare_non_negative"),
        # At most one open rental per user
        Index(
            "uq_ebike_rentals_open_per_user",
            "auth_id",
            unique=True,
            postgresql_where=text("status IN ('requested', 'active')"),
            sqlite_where=text("status IN ('requested', 'active')"),
        ),
    )
