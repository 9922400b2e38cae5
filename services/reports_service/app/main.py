"""FastAPI application for the Reports Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.reports_service.routers import admin_reports_router, reports_router


def create_app() -> FastAPI:
    """Create and configure the Reports Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Reports Service",
        version="0.1.0",
        description="Financial, usage and ESG rollups plus personal impact.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "reports"}

    # Gateway: /api/v1/reports/{path} → /reports/{path}
    app.include_router(reports_router)

    # Gateway: /api/v1/admin/reports/{path} → /admin/reports/{path}
    app.include_router(admin_reports_router)

    return app


app = create_app()
