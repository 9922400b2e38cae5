"""Mobility service routers."""

from services.mobility_service.routers.admin import router as admin_mobility_router
from services.mobility_service.routers.member import router as mobility_router

__all__ = [
    "admin_mobility_router",
    "mobility_router",
]
