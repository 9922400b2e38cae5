"""FastAPI application for the Mobility Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.mobility_service.routers import admin_mobility_router, mobility_router


def create_app() -> FastAPI:
    """Create and configure the Mobility Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Mobility Service",
        version="0.1.0",
        description="E-bike rentals and pay-per-ride green transport.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "mobility"}

    # Gateway: /api/v1/mobility/{path} → /mobility/{path}
    app.include_router(mobility_router)

    # Gateway: /api/v1/admin/mobility/{path} → /admin/mobility/{path}
    app.include_router(admin_mobility_router)

    return app


app = create_app()
