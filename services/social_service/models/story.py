"""Stories expire 24 hours after creation."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType, UTCDateTime
from services.social_service.models.enums import StoryType, enum_values
from sqlalchemy import CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Story(Base):
    __tablename__ = "stories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    story_type: Mapped[StoryType] = mapped_column(
        SAEnum(
            StoryType,
            name="story_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=StoryType.TEXT,
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    achievement_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    achievement_data: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("view_count >= 0", name="ck_story_views_non_negative"),
        CheckConstraint("like_count >= 0", name="ck_story_likes_non_negative"),
    )


class StoryView(Base):
    __tablename__ = "story_views"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    story_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    viewer_auth_id: Mapped[str] = mapped_column(String, nullable=False)
    viewed_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("story_id", "viewer_auth_id", name="uq_story_view"),
    )


class StoryLike(Base):
    __tablename__ = "story_likes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    story_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    auth_id: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )

    __table_args__ = (UniqueConstraint("story_id", "auth_id", name="uq_story_like"),)
