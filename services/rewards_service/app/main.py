"""FastAPI application for the Rewards Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.rewards_service.routers import (
    admin_challenges_router,
    admin_rewards_router,
    challenges_router,
    rewards_router,
)


def create_app() -> FastAPI:
    """Create and configure the Rewards Service FastAPI app."""
    app = FastAPI(
        title="SipSmart Rewards Service",
        version="0.1.0",
        description="Reward catalogue, point redemption, vouchers and challenges.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "rewards"}

    # Gateway: /api/v1/rewards/{path} → /rewards/{path}
    app.include_router(rewards_router)
    # Gateway: /api/v1/challenges/{path} → /challenges/{path}
    app.include_router(challenges_router)

    # Gateway: /api/v1/admin/rewards/{path} → /admin/rewards/{path}
    app.include_router(admin_rewards_router)
    # Gateway: /api/v1/admin/challenges/{path} → /admin/challenges/{path}
    app.include_router(admin_challenges_router)

    return app


app = create_app()
