"""KYC Service schemas package."""

from services.kyc_service.schemas.verification import (  # noqa: F401
    RejectVerificationRequest,
    SubmitVerificationRequest,
    SubmitVerificationResponse,
    VerificationListResponse,
    VerificationLogResponse,
    VerificationResponse,
    VerificationStatusResponse,
)

__all__ = [
    "RejectVerificationRequest",
    "SubmitVerificationRequest",
    "SubmitVerificationResponse",
    "VerificationListResponse",
    "VerificationLogResponse",
    "VerificationResponse",
    "VerificationStatusResponse",
]
