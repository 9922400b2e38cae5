"""Reward catalogue, claims and streak vouchers."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.rewards_service.models.enums import (
    ClaimStatus,
    RewardCategory,
    VoucherStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Reward(Base):
    __tablename__ = "rewards"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    points_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category: Mapped[RewardCategory] = mapped_column(
        SAEnum(
            RewardCategory,
            name="reward_category_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    valid_until: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_reward_stock_non_negative"),
        CheckConstraint("points_cost > 0", name="ck_reward_cost_positive"),
    )


class RewardClaim(Base):
    __tablename__ = "reward_claims"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reward_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rewards.id"), nullable=False, index=True
    )
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    points_spent: Mapped[int] = mapped_column(Integer, nullable=False)
    claim_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    status: Mapped[ClaimStatus] = mapped_column(
        SAEnum(
            ClaimStatus,
            name="claim_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ClaimStatus.PENDING,
        nullable=False,
    )
    claimed_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    fulfilled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)


class Voucher(Base):
    """Percentage discount earned through an on-time return streak."""

    __tablename__ = "vouchers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    discount_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(30), default="streak", nullable=False)
    status: Mapped[VoucherStatus] = mapped_column(
        SAEnum(
            VoucherStatus,
            name="voucher_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=VoucherStatus.ACTIVE,
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    used_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percent > 0 AND discount_percent <= 100",
            name="ck_voucher_discount_range",
        ),
    )
