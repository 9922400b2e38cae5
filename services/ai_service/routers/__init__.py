"""AI service routers."""

from services.ai_service.routers.member import admin_router as admin_ai_router
from services.ai_service.routers.member import router as ai_router

__all__ = [
    "admin_ai_router",
    "ai_router",
]
