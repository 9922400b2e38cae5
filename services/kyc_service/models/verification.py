"""eKYC verification records and their decision log."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType, UTCDateTime
from services.users_service.models.enums import EkycStatus, enum_values
from sqlalchemy import Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class EkycVerification(Base):
    """One identity verification per user, updated in place on resubmission."""

    __tablename__ = "ekyc_verifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)

    id_card_number: Mapped[str] = mapped_column(String(12), nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Storage object paths inside the KYC bucket
    front_image_path: Mapped[str] = mapped_column(Text, nullable=False)
    back_image_path: Mapped[str] = mapped_column(Text, nullable=False)
    face_image_path: Mapped[str] = mapped_column(Text, nullable=False)

    face_similarity: Mapped[float] = mapped_column(Float, nullable=False)
    ocr_confidence: Mapped[float] = mapped_column(Float, nullable=False)
    liveness_score: Mapped[float] = mapped_column(Float, nullable=False)
    verification_score: Mapped[int] = mapped_column(Integer, nullable=False)
    fraud_flags: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    status: Mapped[EkycStatus] = mapped_column(
        SAEnum(
            EkycStatus,
            name="ekyc_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=EkycStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<EkycVerification {self.auth_id} ({self.status.value})>"


class EkycVerificationLog(Base):
    __tablename__ = "ekyc_verification_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    verification_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("ekyc_verifications.id"), nullable=False, index=True
    )
    auth_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[EkycStatus] = mapped_column(
        SAEnum(
            EkycStatus,
            name="ekyc_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    performed_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
