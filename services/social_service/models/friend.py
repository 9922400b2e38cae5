"""Friend requests and friendships."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.social_service.models.enums import FriendRequestStatus, enum_values
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    from_auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    to_auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    status: Mapped[FriendRequestStatus] = mapped_column(
        SAEnum(
            FriendRequestStatus,
            name="friend_request_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=FriendRequestStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("from_auth_id <> to_auth_id", name="ck_friend_request_not_self"),
    )


class Friendship(Base):
    """Undirected edge, stored with ``user_low < user_high``."""

    __tablename__ = "friendships"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_low: Mapped[str] = mapped_column(String, nullable=False, index=True)
    user_high: Mapped[str] = mapped_column(String, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_low", "user_high", name="uq_friendship_pair"),
        CheckConstraint("user_low < user_high", name="ck_friendship_ordered"),
    )
