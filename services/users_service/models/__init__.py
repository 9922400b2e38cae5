"""Users Service models package.

Re-exports all models and enums so that SQLAlchemy's mapper registry sees
every model class on import. When adding a new model, list it here.
"""

from services.users_service.models.engagement import (  # noqa: F401
    GameScore,
    Notification,
    VirtualTree,
)
from services.users_service.models.enums import (  # noqa: F401
    EkycStatus,
    NotificationType,
    PointSource,
    RankLevel,
)
from services.users_service.models.points import GreenPointEntry  # noqa: F401
from services.users_service.models.profile import UserProfile  # noqa: F401

__all__ = [
    # Enums
    "EkycStatus",
    "NotificationType",
    "PointSource",
    "RankLevel",
    # Models
    "UserProfile",
    "GreenPointEntry",
    "GameScore",
    "VirtualTree",
    "Notification",
]
