"""Partners service routers."""

from services.partners_service.routers.admin import router as admin_partners_router
from services.partners_service.routers.admin import (
    redistribution_router as admin_redistribution_router,
)
from services.partners_service.routers.member import router as partners_router

__all__ = [
    "admin_partners_router",
    "admin_redistribution_router",
    "partners_router",
]
