"""Cups Service models package.

Re-exports all models and enums so that SQLAlchemy's mapper registry sees
every model class on import. When adding a new model, list it here.
"""

from services.cups_service.models.cup import Cup, CupTransaction  # noqa: F401
from services.cups_service.models.enums import (  # noqa: F401
    OPEN_STATUSES,
    CupMaterial,
    CupStatus,
    CupTransactionStatus,
    PartnerStatus,
    PartnerType,
)
from services.cups_service.models.store import Store  # noqa: F401

__all__ = [
    # Enums
    "CupMaterial",
    "CupStatus",
    "CupTransactionStatus",
    "OPEN_STATUSES",
    "PartnerStatus",
    "PartnerType",
    # Models
    "Store",
    "Cup",
    "CupTransaction",
]
