"""Points history, mini-game, garden and notification schemas."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.users_service.models.enums import NotificationType, PointSource


class PointEntryResponse(BaseModel):
    id: uuid.UUID
    amount: int
    balance_after: int
    source: PointSource
    reference_id: Optional[str] = None
    description: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PointHistoryResponse(BaseModel):
    entries: list[PointEntryResponse]
    total: int
    skip: int
    limit: int


class GameScoreRequest(BaseModel):
    game_type: Literal["cup_catch", "eco_quiz"]
    score: int = Field(..., ge=0, le=100000)


class GameScoreResponse(BaseModel):
    id: uuid.UUID
    game_type: str
    score: int
    points_earned: int
    green_points: int


class TreeResponse(BaseModel):
    level: int
    growth: int
    total_waterings: int
    last_watered_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WaterTreeResponse(BaseModel):
    tree: TreeResponse
    leveled_up: bool
    bonus_points: int


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
