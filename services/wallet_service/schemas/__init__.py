"""Wallet Service schemas package.

Re-exports all schemas. When adding a new schema, add its import and
__all__ entry.
"""

from services.wallet_service.schemas.topup import (  # noqa: F401
    ConfirmTopupRequest,
    FailTopupRequest,
    TopupInitiateRequest,
    TopupListResponse,
    TopupResponse,
)
from services.wallet_service.schemas.transaction import (  # noqa: F401
    TransactionListResponse,
    TransactionResponse,
)
from services.wallet_service.schemas.wallet import (  # noqa: F401
    AdjustBalanceRequest,
    AdminWalletListResponse,
    FreezeWalletRequest,
    WalletResponse,
)

__all__ = [
    # Wallet
    "AdjustBalanceRequest",
    "AdminWalletListResponse",
    "FreezeWalletRequest",
    "WalletResponse",
    # Transaction
    "TransactionListResponse",
    "TransactionResponse",
    # Topup
    "ConfirmTopupRequest",
    "FailTopupRequest",
    "TopupInitiateRequest",
    "TopupListResponse",
    "TopupResponse",
]
