"""FastAPI application for the Users Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.users_service.routers.admin import router as admin_router
from services.users_service.routers.member import router as member_router


def create_app() -> FastAPI:
    """Create and configure the Users Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Users Service",
        version="0.1.0",
        description="Profiles, green points, ranks, mini-games and notifications.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "users"}

    # Gateway: /api/v1/users/{path} → /users/{path}
    app.include_router(member_router)

    # Gateway: /api/v1/admin/users/{path} → /admin/users/{path}
    app.include_router(admin_router)

    return app


app = create_app()
