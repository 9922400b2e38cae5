"""KYC service routers."""

from services.kyc_service.routers.admin import router as admin_kyc_router
from services.kyc_service.routers.member import router as kyc_router

__all__ = [
    "admin_kyc_router",
    "kyc_router",
]
