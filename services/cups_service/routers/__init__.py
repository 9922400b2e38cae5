"""Cups service routers."""

from services.cups_service.routers.admin import router as admin_cups_router
from services.cups_service.routers.admin import stores_router as admin_stores_router
from services.cups_service.routers.member import router as cups_router
from services.cups_service.routers.stores import router as stores_router

__all__ = [
    "admin_cups_router",
    "admin_stores_router",
    "cups_router",
    "stores_router",
]
