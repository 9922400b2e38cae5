"""Reports service routers."""

from services.reports_service.routers.admin import router as admin_reports_router
from services.reports_service.routers.member import router as reports_router

__all__ = ["admin_reports_router", "reports_router"]
