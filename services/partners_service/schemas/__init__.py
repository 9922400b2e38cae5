"""Partners Service schemas package."""

from services.partners_service.schemas.partner import (  # noqa: F401
    ContractCreate,
    ContractResponse,
    ContractUpdate,
    CupRequestCreate,
    PartnerRegisterRequest,
    PartnerStatusRequest,
)
from services.partners_service.schemas.payment import (  # noqa: F401
    PaymentSettingResponse,
    PaymentSettingUpsert,
)
from services.partners_service.schemas.redistribution import (  # noqa: F401
    OrderCreate,
    OrderResponse,
    OrderSourceUpdate,
    RecommendationResponse,
)

__all__ = [
    "ContractCreate",
    "ContractResponse",
    "ContractUpdate",
    "CupRequestCreate",
    "OrderCreate",
    "OrderResponse",
    "OrderSourceUpdate",
    "PartnerRegisterRequest",
    "PartnerStatusRequest",
    "PaymentSettingResponse",
    "PaymentSettingUpsert",
    "RecommendationResponse",
]
