"""UserProfile model: identity, points, rank and standing."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.users_service.models.enums import EkycStatus, RankLevel, enum_values
from sqlalchemy import Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class UserProfile(Base):
    """One per authenticated user, created on first access."""

    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    student_id: Mapped[Optional[str]] = mapped_column(
        String(20), unique=True, index=True, nullable=True
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Spendable balance; lifetime total drives rank and never decreases.
    green_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    lifetime_green_points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    rank_level: Mapped[RankLevel] = mapped_column(
        SAEnum(
            RankLevel,
            name="rank_level_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=RankLevel.SEED,
        nullable=False,
    )
    ekyc_status: Mapped[EkycStatus] = mapped_column(
        SAEnum(
            EkycStatus,
            name="ekyc_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=EkycStatus.NONE,
        nullable=False,
    )
    is_profile_public: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_blacklisted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    blacklist_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    green_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    best_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_cups_saved: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_return_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("green_points >= 0", name="ck_profile_points_non_negative"),
        CheckConstraint(
            "lifetime_green_points >= 0", name="ck_profile_lifetime_non_negative"
        ),
    )

    def __repr__(self) -> str:
        return f"<UserProfile {self.auth_id} points={self.green_points}>"
