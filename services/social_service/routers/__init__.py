"""Social service routers."""

from services.social_service.routers.admin import router as admin_social_router
from services.social_service.routers.member import router as social_router

__all__ = ["admin_social_router", "social_router"]
