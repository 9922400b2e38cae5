"""Partners Service models package."""

from services.partners_service.models.enums import (  # noqa: F401
    ContractStatus,
    ContractType,
    OrderPriority,
    PaymentProvider,
    RedistributionStatus,
)
from services.partners_service.models.partner import (  # noqa: F401
    PartnerContract,
    PaymentSetting,
    RedistributionOrder,
)

__all__ = [
    # Enums
    "ContractStatus",
    "ContractType",
    "OrderPriority",
    "PaymentProvider",
    "RedistributionStatus",
    # Models
    "PartnerContract",
    "PaymentSetting",
    "RedistributionOrder",
]
