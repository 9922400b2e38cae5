"""FastAPI application for the Partners Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.partners_service.routers import (
    admin_partners_router,
    admin_redistribution_router,
    partners_router,
)


def create_app() -> FastAPI:
    """Create and configure the Partners Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Partners Service",
        version="0.1.0",
        description="Partner onboarding, contracts, cup redistribution and payment settings.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "partners"}

    # Gateway: /api/v1/partners/{path} → /partners/{path}
    app.include_router(partners_router)

    # Gateway: /api/v1/admin/partners/{path} → /admin/partners/{path}
    app.include_router(admin_partners_router)
    # Gateway: /api/v1/admin/redistribution/{path} → /admin/redistribution/{path}
    app.include_router(admin_redistribution_router)

    return app


app = create_app()
