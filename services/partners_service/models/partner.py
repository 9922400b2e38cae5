"""Partner contracts, cup redistribution orders and payment settings."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.partners_service.models.enums import (
    ContractStatus,
    ContractType,
    OrderPriority,
    PaymentProvider,
    RedistributionStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import (
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column


class PartnerContract(Base):
    __tablename__ = "partner_contracts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=False, index=True
    )
    contract_type: Mapped[ContractType] = mapped_column(
        SAEnum(
            ContractType,
            name="contract_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    revenue_share_percent: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    fixed_monthly_fee: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[ContractStatus] = mapped_column(
        SAEnum(
            ContractStatus,
            name="contract_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ContractStatus.DRAFT,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "revenue_share_percent >= 0 AND revenue_share_percent <= 100",
            name="ck_contract_share_range",
        ),
        CheckConstraint("fixed_monthly_fee >= 0", name="ck_contract_fee_non_negative"),
    )


class RedistributionOrder(Base):
    """Move available cups between stores. No source means the central hub."""

    __tablename__ = "redistribution_orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_store_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=True
    )
    to_store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    priority: Mapped[OrderPriority] = mapped_column(
        SAEnum(
            OrderPriority,
            name="order_priority_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=OrderPriority.MEDIUM,
        nullable=False,
    )
    status: Mapped[RedistributionStatus] = mapped_column(
        SAEnum(
            RedistributionStatus,
            name="redistribution_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RedistributionStatus.PENDING,
        nullable=False,
        index=True,
    )
    requested_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    dispatched_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_redistribution_quantity_positive"),
    )


class PaymentSetting(Base):
    __tablename__ = "payment_settings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    provider: Mapped[PaymentProvider] = mapped_column(
        SAEnum(
            PaymentProvider,
            name="payment_provider_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    key: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    is_sensitive: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("provider", "key", name="uq_payment_setting_provider_key"),
    )
