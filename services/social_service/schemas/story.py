"""Story schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.social_service.models.enums import StoryType


class StoryCreate(BaseModel):
    story_type: StoryType = StoryType.TEXT
    content: str = Field(..., min_length=1, max_length=1000)
    image_url: Optional[str] = None
    achievement_type: Optional[str] = Field(None, max_length=30)
    achievement_data: Optional[dict] = None


class StoryResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    author_name: Optional[str] = None
    story_type: StoryType
    content: str
    image_url: Optional[str] = None
    achievement_type: Optional[str] = None
    achievement_data: Optional[dict] = None
    view_count: int
    like_count: int
    liked_by_me: bool = False
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)
