"""Rewards service routers."""

from services.rewards_service.routers.admin import (
    challenges_router as admin_challenges_router,
)
from services.rewards_service.routers.admin import router as admin_rewards_router
from services.rewards_service.routers.member import challenges_router
from services.rewards_service.routers.member import router as rewards_router

__all__ = [
    "admin_challenges_router",
    "admin_rewards_router",
    "challenges_router",
    "rewards_router",
]
