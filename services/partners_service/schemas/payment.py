"""Payment settings schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from services.partners_service.models.enums import PaymentProvider


class PaymentSettingUpsert(BaseModel):
    value: str = Field(..., min_length=1)
    is_sensitive: bool = True


class PaymentSettingResponse(BaseModel):
    id: uuid.UUID
    provider: PaymentProvider
    key: str
    value: str
    is_sensitive: bool
    updated_by: Optional[str] = None
    updated_at: datetime
