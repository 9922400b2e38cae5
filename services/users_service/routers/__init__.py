"""Users service routers."""

from services.users_service.routers.admin import router as admin_router
from services.users_service.routers.member import router as users_router

__all__ = [
    "admin_router",
    "users_router",
]
