"""Cups Service schemas package."""

from services.cups_service.schemas.cup import (  # noqa: F401
    BulkCupCreate,
    BulkCupResponse,
    CupListResponse,
    CupResponse,
    CupStatusUpdate,
    ScanRequest,
    ScanResponse,
)
from services.cups_service.schemas.store import (  # noqa: F401
    StoreCreate,
    StoreInventory,
    StoreResponse,
    StoreUpdate,
)
from services.cups_service.schemas.transaction import (  # noqa: F401
    BorrowedCupResponse,
    BorrowRequest,
    BorrowResponse,
    CupTransactionResponse,
    OverdueSweepResponse,
    ReturnRequest,
    ReturnResponse,
    TransactionListResponse,
    TransactionOverrideRequest,
)

__all__ = [
    "BorrowedCupResponse",
    "BorrowRequest",
    "BorrowResponse",
    "BulkCupCreate",
    "BulkCupResponse",
    "CupListResponse",
    "CupResponse",
    "CupStatusUpdate",
    "CupTransactionResponse",
    "OverdueSweepResponse",
    "ReturnRequest",
    "ReturnResponse",
    "ScanRequest",
    "ScanResponse",
    "StoreCreate",
    "StoreInventory",
    "StoreResponse",
    "StoreUpdate",
    "TransactionListResponse",
    "TransactionOverrideRequest",
]
