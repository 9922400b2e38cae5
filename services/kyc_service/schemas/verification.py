"""eKYC request/response schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.users_service.models.enums import EkycStatus


class SubmitVerificationRequest(BaseModel):
    id_card_number: str = Field(..., pattern=r"^(\d{9}|\d{12})$")
    full_name: str = Field(..., min_length=3, max_length=200)
    date_of_birth: date
    address: Optional[str] = Field(None, max_length=500)
    # Base64, optionally prefixed with data:image/...;base64,
    front_image: str
    back_image: str
    face_image: str


class SubmitVerificationResponse(BaseModel):
    verification_id: uuid.UUID
    status: EkycStatus
    verified: bool
    score: int
    fraud_flags: list[str]
    message: str


class VerificationStatusResponse(BaseModel):
    verified: bool
    status: EkycStatus
    score: Optional[int] = None
    verified_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class VerificationResponse(BaseModel):
    id: uuid.UUID
    auth_id: str
    id_card_number: str
    full_name: str
    date_of_birth: date
    address: Optional[str] = None
    front_image_path: str
    back_image_path: str
    face_image_path: str
    face_similarity: float
    ocr_confidence: float
    liveness_score: float
    verification_score: int
    fraud_flags: list[str]
    status: EkycStatus
    rejection_reason: Optional[str] = None
    reviewed_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    submitted_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VerificationListResponse(BaseModel):
    verifications: list[VerificationResponse]
    total: int
    skip: int
    limit: int


class RejectVerificationRequest(BaseModel):
    reason: str = Field(..., min_length=3, max_length=500)


class VerificationLogResponse(BaseModel):
    id: uuid.UUID
    verification_id: uuid.UUID
    action: str
    status: EkycStatus
    score: Optional[int] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
