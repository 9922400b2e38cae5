"""Chat assistant schemas."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., max_length=4000)


class ChatRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)
    history: list[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str
    source: str


class AIRequestResponse(BaseModel):
    id: uuid.UUID
    auth_id: Optional[str] = None
    source: str
    model_provider: Optional[str] = None
    model_name: Optional[str] = None
    message: str
    response: str
    error_message: Optional[str] = None
    latency_ms: Optional[int] = None
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AIRequestListResponse(BaseModel):
    items: list[AIRequestResponse]
    total: int
