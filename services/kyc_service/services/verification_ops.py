"""eKYC submission and review.

One record per user. Submissions are scored by the configured
``VerificationProvider``; high scores are approved immediately, the rest
wait for an admin.
"""

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_utc, utc_now
from libs.common.errors import (
    DuplicateVerification,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from libs.common.lifecycle import ensure_transition
from libs.common.logging import get_logger
from services.kyc_service.models import EkycStatus, EkycVerification, EkycVerificationLog
from services.kyc_service.services.scoring import (
    VerificationScores,
    composite_score,
    fraud_flags,
)
from services.users_service.models import NotificationType, UserProfile
from services.users_service.services.profile_ops import get_or_create_profile, notify
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")

IMAGE_KINDS = ("front", "back", "face")


@dataclass(frozen=True)
class IdentityDetails:
    id_card_number: str
    full_name: str
    date_of_birth: date
    address: Optional[str] = None


def decode_image(data: str, field: str) -> bytes:
    """Decode base64 image data, with or without a ``data:image/...`` prefix."""
    payload = _DATA_URL_PREFIX.sub("", (data or "").strip())
    if not payload:
        raise ValidationFailed(f"{field}: image is required")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationFailed(f"{field}: invalid base64 image") from e


def image_paths(auth_id: str, timestamp: int) -> dict[str, str]:
    return {kind: f"{auth_id}/{kind}_{timestamp}.jpg" for kind in IMAGE_KINDS}


def is_verified(record: Optional[EkycVerification]) -> bool:
    if record is None or record.status != EkycStatus.APPROVED:
        return False
    return record.expires_at is None or ensure_utc(record.expires_at) > utc_now()


async def get_verification(db: AsyncSession, auth_id: str) -> Optional[EkycVerification]:
    result = await db.execute(
        select(EkycVerification).where(EkycVerification.auth_id == auth_id)
    )
    return result.scalar_one_or_none()


async def ensure_can_submit(db: AsyncSession, auth_id: str) -> Optional[EkycVerification]:
    """Reject resubmission while pending or approved and unexpired."""
    existing = await get_verification(db, auth_id)
    if existing is None:
        return None
    if existing.status == EkycStatus.PENDING:
        raise DuplicateVerification("Your verification is pending review.")
    if is_verified(existing):
        raise DuplicateVerification("You are already verified.")
    return existing


async def require_verified(db: AsyncSession, auth_id: str) -> EkycVerification:
    record = await get_verification(db, auth_id)
    if not is_verified(record):
        raise PermissionDenied(
            "Bạn cần hoàn thành xác minh danh tính (eKYC) để sử dụng xe đạp điện.",
            code="ekyc_required",
            extra={"action_required": "complete_ekyc"},
        )
    return record


async def _log(
    db: AsyncSession,
    record: EkycVerification,
    action: str,
    *,
    performed_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> EkycVerificationLog:
    entry = EkycVerificationLog(
        verification_id=record.id,
        auth_id=record.auth_id,
        action=action,
        status=record.status,
        score=record.verification_score,
        performed_by=performed_by,
        notes=notes,
    )
    db.add(entry)
    await db.flush()
    return entry


def _approve(record: EkycVerification, reviewed_by: Optional[str] = None) -> None:
    now = utc_now()
    record.status = EkycStatus.APPROVED
    record.verified_at = now
    record.expires_at = now + timedelta(days=get_settings().EKYC_VALIDITY_DAYS)
    record.rejection_reason = None
    record.reviewed_by = reviewed_by


async def _sync_profile(db: AsyncSession, record: EkycVerification) -> UserProfile:
    profile = await get_or_create_profile(db, record.auth_id)
    profile.ekyc_status = record.status
    await db.flush()
    return profile


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def submit_verification(
    db: AsyncSession,
    auth_id: str,
    details: IdentityDetails,
    paths: dict[str, str],
    scores: VerificationScores,
) -> EkycVerification:
    record = await ensure_can_submit(db, auth_id)
    score = composite_score(scores)
    flags = fraud_flags(scores)

    if record is None:
        record = EkycVerification(auth_id=auth_id, status=EkycStatus.NONE)
        db.add(record)

    previous = record.status
    record.id_card_number = details.id_card_number
    record.full_name = details.full_name
    record.date_of_birth = details.date_of_birth
    record.address = details.address
    record.front_image_path = paths["front"]
    record.back_image_path = paths["back"]
    record.face_image_path = paths["face"]
    record.face_similarity = scores.face_similarity
    record.ocr_confidence = scores.ocr_confidence
    record.liveness_score = scores.liveness
    record.verification_score = score
    record.fraud_flags = flags
    record.submitted_at = utc_now()

    if score >= get_settings().EKYC_AUTO_APPROVE_SCORE:
        ensure_transition("ekyc", previous, EkycStatus.APPROVED)
        _approve(record)
        action = "auto_approved"
    else:
        ensure_transition("ekyc", previous, EkycStatus.PENDING)
        record.status = EkycStatus.PENDING
        record.verified_at = None
        record.expires_at = None
        action = "submitted"
    await db.flush()

    await _log(db, record, action, notes=", ".join(flags) or None)
    await _sync_profile(db, record)
    if record.status == EkycStatus.APPROVED:
        await notify(
            db,
            auth_id,
            "Xác minh danh tính thành công",
            "Tài khoản của bạn đã được xác minh. Bạn có thể thuê xe đạp điện.",
            NotificationType.EKYC,
        )
    logger.info("eKYC %s for %s (score=%d, flags=%s)", action, auth_id, score, flags)
    return record


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


async def get_verification_by_id(db: AsyncSession, verification_id) -> EkycVerification:
    result = await db.execute(
        select(EkycVerification).where(EkycVerification.id == verification_id)
    )
    record = result.scalar_one_or_none()
    if not record:
        raise NotFound("Verification not found")
    return record


async def approve_verification(
    db: AsyncSession, verification_id, *, reviewed_by: str
) -> EkycVerification:
    record = await get_verification_by_id(db, verification_id)
    ensure_transition("ekyc", record.status, EkycStatus.APPROVED)
    _approve(record, reviewed_by)
    await db.flush()
    await _log(db, record, "approved", performed_by=reviewed_by)
    await _sync_profile(db, record)
    await notify(
        db,
        record.auth_id,
        "Xác minh danh tính thành công",
        "Hồ sơ eKYC của bạn đã được duyệt.",
        NotificationType.EKYC,
    )
    logger.info("eKYC approved for %s by %s", record.auth_id, reviewed_by)
    return record


async def reject_verification(
    db: AsyncSession, verification_id, *, reviewed_by: str, reason: str
) -> EkycVerification:
    record = await get_verification_by_id(db, verification_id)
    ensure_transition("ekyc", record.status, EkycStatus.REJECTED)
    record.status = EkycStatus.REJECTED
    record.rejection_reason = reason
    record.reviewed_by = reviewed_by
    record.verified_at = None
    record.expires_at = None
    await db.flush()
    await _log(db, record, "rejected", performed_by=reviewed_by, notes=reason)
    await _sync_profile(db, record)
    await notify(
        db,
        record.auth_id,
        "Xác minh danh tính bị từ chối",
        f"Lý do: {reason}. Vui lòng gửi lại hồ sơ.",
        NotificationType.EKYC,
    )
    logger.info("eKYC rejected for %s by %s: %s", record.auth_id, reviewed_by, reason)
    return record
