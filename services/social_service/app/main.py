"""FastAPI application for the Social Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.social_service.routers import admin_social_router, social_router


def create_app() -> FastAPI:
    """Create and configure the Social Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Social Service",
        version="0.1.0",
        description="Friends, stories and public profiles.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "social"}

    # Gateway: /api/v1/social/{path} → /social/{path}
    app.include_router(social_router)

    # Gateway: /api/v1/admin/social/{path} → /admin/social/{path}
    app.include_router(admin_social_router)

    return app


app = create_app()
