"""KYC Service models package."""

from services.kyc_service.models.verification import (  # noqa: F401
    EkycVerification,
    EkycVerificationLog,
)
from services.users_service.models.enums import EkycStatus  # noqa: F401

__all__ = [
    "EkycStatus",
    "EkycVerification",
    "EkycVerificationLog",
]
