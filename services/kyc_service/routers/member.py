"""Member eKYC submission and status."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.storage import StorageService, get_kyc_storage, normalize_image
from libs.db.session import atomic, get_async_db
from services.kyc_service.models import EkycStatus
from services.kyc_service.schemas import (
    SubmitVerificationRequest,
    SubmitVerificationResponse,
    VerificationStatusResponse,
)
from services.kyc_service.services.scoring import (
    VerificationProvider,
    get_verification_provider,
)
from services.kyc_service.services.verification_ops import (
    IMAGE_KINDS,
    IdentityDetails,
    decode_image,
    ensure_can_submit,
    get_verification,
    image_paths,
    is_verified,
    submit_verification,
)
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

logger = get_logger(__name__)
router = APIRouter(prefix="/kyc", tags=["kyc"])


@router.post(
    "/submit",
    response_model=SubmitVerificationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit(
    body: SubmitVerificationRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    provider: VerificationProvider = Depends(get_verification_provider),
    storage: StorageService = Depends(get_kyc_storage),
):
    """Upload ID card and selfie images and score them.

    Images are stored before the record is written; if writing the record
    fails the stored images are removed again.
    """
    auth_id = current_user.user_id
    await ensure_can_submit(db, auth_id)

    images = {
        kind: normalize_image(decode_image(getattr(body, f"{kind}_image"), f"{kind}_image"))
        for kind in IMAGE_KINDS
    }
    scores = provider.score(images["front"], images["back"], images["face"])

    paths = image_paths(auth_id, int(utc_now().timestamp() * 1000))
    files = {paths[kind]: images[kind] for kind in IMAGE_KINDS}
    await run_in_threadpool(storage.upload_all, files)

    details = IdentityDetails(
        id_card_number=body.id_card_number,
        full_name=body.full_name.strip(),
        date_of_birth=body.date_of_birth,
        address=body.address,
    )
    try:
        async with atomic(db):
            record = await submit_verification(db, auth_id, details, paths, scores)
    except Exception:
        await run_in_threadpool(storage.remove, list(files))
        raise

    approved = record.status == EkycStatus.APPROVED
    return SubmitVerificationResponse(
        verification_id=record.id,
        status=record.status,
        verified=approved,
        score=record.verification_score,
        fraud_flags=record.fraud_flags,
        message=(
            "Xác minh thành công!"
            if approved
            else "Hồ sơ đã được gửi và đang chờ duyệt."
        ),
    )


@router.get("/status", response_model=VerificationStatusResponse)
async def get_status(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    record = await get_verification(db, current_user.user_id)
    if record is None:
        return VerificationStatusResponse(verified=False, status=EkycStatus.NONE)
    return VerificationStatusResponse(
        verified=is_verified(record),
        status=record.status,
        score=record.verification_score,
        verified_at=record.verified_at,
        expires_at=record.expires_at,
        rejection_reason=record.rejection_reason,
    )
