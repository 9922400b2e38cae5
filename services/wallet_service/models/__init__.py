"""Wallet Service models package.

Re-exports all models and enums so that SQLAlchemy's mapper registry sees
every model class on import. When adding a new model, list it here.
"""

from services.wallet_service.models.enums import (  # noqa: F401
    PaymentMethod,
    TopupStatus,
    TransactionDirection,
    TransactionType,
    WalletStatus,
)
from services.wallet_service.models.topup import WalletTopup  # noqa: F401
from services.wallet_service.models.transaction import WalletTransaction  # noqa: F401
from services.wallet_service.models.wallet import Wallet  # noqa: F401

__all__ = [
    # Enums
    "PaymentMethod",
    "TopupStatus",
    "TransactionDirection",
    "TransactionType",
    "WalletStatus",
    # Models
    "Wallet",
    "WalletTransaction",
    "WalletTopup",
]
