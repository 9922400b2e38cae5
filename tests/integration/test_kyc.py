"""Integration tests for eKYC submission and admin review.

Storage and the scoring provider are swapped for in-process fakes.
"""

import base64
from io import BytesIO
from typing import Optional

import pytest
import pytest_asyncio
from libs.common.errors import UpstreamError
from libs.common.storage import StorageService, get_kyc_storage
from PIL import Image
from services.kyc_service.models import EkycVerification, EkycVerificationLog
from services.kyc_service.services.scoring import (
    VerificationProvider,
    VerificationScores,
    get_verification_provider,
)
from services.users_service.models import EkycStatus, UserProfile
from sqlalchemy import func, select


class FakeStorage(StorageService):
    def __init__(self, fail_after: Optional[int] = None):
        super().__init__("ekyc-test")
        self.files: dict[str, bytes] = {}
        self.removed: list[str] = []
        self.fail_after = fail_after

    def upload(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        if self.fail_after is not None and len(self.files) >= self.fail_after:
            raise UpstreamError("Failed to upload file")
        self.files[path] = data
        return path

    def remove(self, paths: list[str]) -> None:
        self.removed.extend(paths)
        for path in paths:
            self.files.pop(path, None)


class FixedProvider(VerificationProvider):
    def __init__(self, scores: VerificationScores):
        self.scores = scores

    def score(self, front: bytes, back: bytes, face: bytes) -> VerificationScores:
        return self.scores


HIGH = VerificationScores(face_similarity=95, ocr_confidence=96, liveness=94)
LOW = VerificationScores(face_similarity=70, ocr_confidence=80, liveness=90)


def _image_b64(color="white", with_prefix=False) -> str:
    buffer = BytesIO()
    Image.new("RGB", (40, 30), color).save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}" if with_prefix else encoded


def _submission(**overrides) -> dict:
    body = {
        "id_card_number": "079203001234",
        "full_name": "Nguyễn Thị Lan",
        "date_of_birth": "2003-04-12",
        "address": "Quận 10, TP.HCM",
        "front_image": _image_b64(with_prefix=True),
        "back_image": _image_b64("gray"),
        "face_image": _image_b64("beige"),
    }
    body.update(overrides)
    return body


@pytest_asyncio.fixture
async def kyc_env(kyc_client):
    """Install fake storage and a configurable provider on the KYC app."""
    from services.kyc_service.app.main import app

    storage = FakeStorage()
    state = {"scores": HIGH}
    app.dependency_overrides[get_kyc_storage] = lambda: storage
    app.dependency_overrides[get_verification_provider] = lambda: FixedProvider(
        state["scores"]
    )
    yield storage, state


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_high_score_auto_approves(kyc_client, kyc_env, db_session, member_profile):
    """POST /kyc/submit: a confident match is approved without review."""
    storage, _ = kyc_env

    response = await kyc_client.post("/kyc/submit", json=_submission())

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "approved"
    assert data["verified"] is True
    assert data["score"] == 95
    assert data["fraud_flags"] == []

    assert len(storage.files) == 3
    assert all(path.startswith("member-1/") for path in storage.files)
    assert all(blob.startswith(b"\xff\xd8") for blob in storage.files.values())

    ekyc = await db_session.execute(
        select(UserProfile.ekyc_status).where(UserProfile.auth_id == "member-1")
    )
    assert ekyc.scalar_one() == EkycStatus.APPROVED

    status = await kyc_client.get("/kyc/status")
    assert status.json()["verified"] is True
    assert status.json()["expires_at"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_low_score_waits_for_review(kyc_client, kyc_env, member_profile):
    _, state = kyc_env
    state["scores"] = LOW

    response = await kyc_client.post("/kyc/submit", json=_submission())

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["status"] == "pending"
    assert data["verified"] is False
    assert data["fraud_flags"] == ["low_face_match", "blurry_document"]

    again = await kyc_client.post("/kyc/submit", json=_submission())
    assert again.status_code == 400
    assert again.json()["code"] == "duplicate_verification"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_without_submission(kyc_client, kyc_env):
    response = await kyc_client.get("/kyc/status")

    assert response.status_code == 200
    assert response.json() == {
        "verified": False,
        "status": "none",
        "score": None,
        "verified_at": None,
        "expires_at": None,
        "rejection_reason": None,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_image_rejected(kyc_client, kyc_env, db_session):
    storage, _ = kyc_env

    response = await kyc_client.post(
        "/kyc/submit", json=_submission(face_image="bm90IGFuIGltYWdl")
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert storage.files == {}
    count = await db_session.execute(select(func.count()).select_from(EkycVerification))
    assert count.scalar() == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bad_id_card_number(kyc_client, kyc_env):
    response = await kyc_client.post("/kyc/submit", json=_submission(id_card_number="12345"))

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "scores, score, expected",
    [
        # 40 + 27 + 18 = 85
        (VerificationScores(face_similarity=80, ocr_confidence=90, liveness=90), 85, "approved"),
        # 39 + 27 + 18 = 84
        (VerificationScores(face_similarity=78, ocr_confidence=90, liveness=90), 84, "pending"),
    ],
)
async def test_auto_approval_threshold(
    kyc_client, kyc_env, member_profile, scores, score, expected
):
    _, state = kyc_env
    state["scores"] = scores

    response = await kyc_client.post("/kyc/submit", json=_submission())

    assert response.status_code == 201, response.text
    assert response.json()["status"] == expected
    assert response.json()["score"] == score


@pytest.mark.asyncio
@pytest.mark.integration
async def test_verified_user_cannot_resubmit(kyc_client, kyc_env, db_session, member_profile):
    storage, _ = kyc_env
    first = await kyc_client.post("/kyc/submit", json=_submission())
    assert first.json()["status"] == "approved"

    again = await kyc_client.post(
        "/kyc/submit", json=_submission(full_name="Trần Văn Nam")
    )

    assert again.status_code == 400
    assert again.json()["code"] == "duplicate_verification"
    assert len(storage.files) == 3
    records = await db_session.execute(select(func.count()).select_from(EkycVerification))
    assert records.scalar() == 1
    logs = await db_session.execute(select(func.count()).select_from(EkycVerificationLog))
    assert logs.scalar() == 1
    name = await db_session.execute(select(EkycVerification.full_name))
    assert name.scalar_one() == "Nguyễn Thị Lan"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_storage_failure_leaves_nothing_behind(kyc_client, db_session):
    from services.kyc_service.app.main import app

    storage = FakeStorage(fail_after=2)
    app.dependency_overrides[get_kyc_storage] = lambda: storage
    app.dependency_overrides[get_verification_provider] = lambda: FixedProvider(HIGH)

    response = await kyc_client.post("/kyc/submit", json=_submission())

    assert response.status_code == 500
    assert response.json()["code"] == "upstream_error"
    assert storage.files == {}
    assert len(storage.removed) == 2
    count = await db_session.execute(select(func.count()).select_from(EkycVerification))
    assert count.scalar() == 0


# ---------------------------------------------------------------------------
# Admin review
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_rejects_then_user_resubmits(
    kyc_client, kyc_env, db_session, member_profile, admin_headers
):
    _, state = kyc_env
    state["scores"] = LOW
    submitted = await kyc_client.post("/kyc/submit", json=_submission())
    verification_id = submitted.json()["verification_id"]

    queue = await kyc_client.get(
        "/admin/kyc/verifications", params={"status": "pending"}, headers=admin_headers
    )
    assert queue.json()["total"] == 1

    rejected = await kyc_client.post(
        f"/admin/kyc/verifications/{verification_id}/reject",
        json={"reason": "Ảnh CCCD bị mờ"},
        headers=admin_headers,
    )
    assert rejected.status_code == 200, rejected.text
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "Ảnh CCCD bị mờ"

    state["scores"] = HIGH
    resubmitted = await kyc_client.post("/kyc/submit", json=_submission())
    assert resubmitted.status_code == 201, resubmitted.text
    assert resubmitted.json()["status"] == "approved"
    assert resubmitted.json()["verification_id"] == verification_id

    logs = await kyc_client.get(
        f"/admin/kyc/verifications/{verification_id}/logs", headers=admin_headers
    )
    assert [entry["action"] for entry in logs.json()] == [
        "submitted",
        "rejected",
        "auto_approved",
    ]
    count = await db_session.execute(select(func.count()).select_from(EkycVerificationLog))
    assert count.scalar() == 3


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_approves_pending(kyc_client, kyc_env, member_profile, admin_headers):
    _, state = kyc_env
    state["scores"] = LOW
    submitted = await kyc_client.post("/kyc/submit", json=_submission())
    verification_id = submitted.json()["verification_id"]

    approved = await kyc_client.post(
        f"/admin/kyc/verifications/{verification_id}/approve", headers=admin_headers
    )

    assert approved.status_code == 200, approved.text
    assert approved.json()["status"] == "approved"
    assert approved.json()["reviewed_by"] == "member-1@sipsmart.vn"
