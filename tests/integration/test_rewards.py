"""Integration tests for the reward catalogue, claims and challenges."""

from datetime import timedelta

import pytest
from libs.common.datetime_utils import utc_now
from services.rewards_service.models import (
    Reward,
    RewardClaim,
    UserChallenge,
    UserChallengeStatus,
)
from services.rewards_service.services import reward_ops
from services.users_service.models import GreenPointEntry, UserProfile
from sqlalchemy import func, select, update
from tests.factories import ChallengeFactory, RewardFactory

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _give_points(db_session, profile, points):
    profile.green_points = points
    profile.lifetime_green_points = points
    await db_session.commit()


async def _add(db_session, obj):
    db_session.add(obj)
    await db_session.commit()
    return obj


async def _points(db_session, auth_id) -> int:
    result = await db_session.execute(
        select(UserProfile.green_points).where(UserProfile.auth_id == auth_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Catalogue and claims
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_catalogue_hides_inactive_and_expired(rewards_client, db_session):
    await _add(db_session, RewardFactory.create(name="Bình giữ nhiệt", points_cost=300))
    await _add(db_session, RewardFactory.create(name="Voucher 10%", points_cost=50))
    await _add(db_session, RewardFactory.create(name="Ẩn", is_active=False))
    await _add(
        db_session,
        RewardFactory.create(name="Hết hạn", valid_until=utc_now() - timedelta(days=1)),
    )

    response = await rewards_client.get("/rewards")

    assert response.status_code == 200, response.text
    assert [r["name"] for r in response.json()] == ["Voucher 10%", "Bình giữ nhiệt"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_claim_spends_points_and_stock(rewards_client, db_session, member_profile):
    """POST /rewards/{id}/claim: points and stock move together."""
    await _give_points(db_session, member_profile, 150)
    reward = await _add(db_session, RewardFactory.create())

    response = await rewards_client.post(f"/rewards/{reward.id}/claim")

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["remaining_points"] == 50
    assert data["remaining_stock"] == 4
    assert data["claim"]["claim_code"].startswith("RW-")
    assert data["claim"]["status"] == "pending"

    entry = (await db_session.execute(select(GreenPointEntry))).scalar_one()
    assert entry.amount == -100
    assert entry.balance_after == 50

    # Spending does not lower lifetime points, so rank is kept
    await db_session.refresh(member_profile)
    assert member_profile.lifetime_green_points == 150

    mine = await rewards_client.get("/rewards/claims/me")
    assert len(mine.json()) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_claim_insufficient_points(rewards_client, db_session, member_profile):
    await _give_points(db_session, member_profile, 99)
    reward = await _add(db_session, RewardFactory.create())
    reward_id = reward.id

    response = await rewards_client.post(f"/rewards/{reward_id}/claim")

    assert response.status_code == 400
    assert response.json()["code"] == "insufficient_points"
    stock = await db_session.execute(select(Reward.stock).where(Reward.id == reward_id))
    assert stock.scalar_one() == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_claim_out_of_stock(rewards_client, db_session, member_profile):
    await _give_points(db_session, member_profile, 500)
    reward = await _add(db_session, RewardFactory.create(stock=0))

    response = await rewards_client.post(f"/rewards/{reward.id}/claim")

    assert response.status_code == 400
    assert response.json()["code"] == "out_of_stock"
    assert await _points(db_session, "member-1") == 500


@pytest.mark.asyncio
@pytest.mark.integration
async def test_claim_loses_race_for_last_item(
    rewards_client, db_session, other_session, member_profile, monkeypatch
):
    """The last item goes to another claim after this one passed its checks."""
    await _give_points(db_session, member_profile, 500)
    reward = await _add(db_session, RewardFactory.create(stock=1))
    reward_id = reward.id
    real_conditional_update = reward_ops.conditional_update

    async def update_after_rival_claim(db, model, *criteria, **values):
        if model is Reward:
            await other_session.execute(
                update(Reward).where(Reward.id == reward_id).values(stock=0)
            )
            await other_session.commit()
        return await real_conditional_update(db, model, *criteria, **values)

    monkeypatch.setattr(reward_ops, "conditional_update", update_after_rival_claim)

    response = await rewards_client.post(f"/rewards/{reward_id}/claim")

    assert response.status_code == 400
    assert response.json()["code"] == "out_of_stock"
    assert await _points(db_session, "member-1") == 500
    stock = await db_session.execute(select(Reward.stock).where(Reward.id == reward_id))
    assert stock.scalar_one() == 0
    claims = await db_session.execute(select(func.count()).select_from(RewardClaim))
    assert claims.scalar() == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_claim_expired_reward(rewards_client, db_session, member_profile):
    await _give_points(db_session, member_profile, 500)
    reward = await _add(
        db_session, RewardFactory.create(valid_until=utc_now() - timedelta(hours=1))
    )

    response = await rewards_client.post(f"/rewards/{reward.id}/claim")

    assert response.status_code == 400
    assert response.json()["code"] == "reward_expired"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_fulfills_claim(rewards_client, db_session, member_profile, admin_headers):
    await _give_points(db_session, member_profile, 100)
    reward = await _add(db_session, RewardFactory.create())
    claimed = await rewards_client.post(f"/rewards/{reward.id}/claim")
    claim_id = claimed.json()["claim"]["id"]

    response = await rewards_client.post(
        f"/admin/rewards/claims/{claim_id}/fulfill", headers=admin_headers
    )

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "fulfilled"
    assert response.json()["fulfilled_at"] is not None

    again = await rewards_client.post(
        f"/admin/rewards/claims/{claim_id}/fulfill", headers=admin_headers
    )
    assert again.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_creates_reward(rewards_client, admin_headers):
    response = await rewards_client.post(
        "/admin/rewards",
        json={"name": "Ống hút tre", "points_cost": 80, "stock": 20, "category": "merchandise"},
        headers=admin_headers,
    )

    assert response.status_code == 201, response.text
    assert response.json()["stock"] == 20


@pytest.mark.asyncio
@pytest.mark.integration
async def test_archived_reward_leaves_catalogue(
    rewards_client, db_session, member_profile, admin_headers
):
    await _give_points(db_session, member_profile, 500)
    reward = await _add(db_session, RewardFactory.create())

    archived = await rewards_client.delete(f"/admin/rewards/{reward.id}", headers=admin_headers)
    assert archived.status_code == 204

    assert (await rewards_client.get("/rewards")).json() == []
    claim = await rewards_client.post(f"/rewards/{reward.id}/claim")
    assert claim.status_code == 400
    assert claim.json()["code"] == "reward_inactive"
    assert await _points(db_session, "member-1") == 500


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_join_challenge_once(rewards_client, db_session, member_profile):
    challenge = await _add(db_session, ChallengeFactory.create())

    joined = await rewards_client.post(f"/challenges/{challenge.id}/join")
    assert joined.status_code == 201, joined.text
    assert joined.json()["progress"] == 0
    assert joined.json()["status"] == "in_progress"

    listed = await rewards_client.get("/challenges")
    assert listed.json()[0]["participant_count"] == 1

    again = await rewards_client.post(f"/challenges/{challenge.id}/join")
    assert again.status_code == 400
    assert again.json()["code"] == "already_joined"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_join_full_challenge(rewards_client, db_session, member_profile):
    challenge = await _add(db_session, ChallengeFactory.create(max_participants=1))
    await _add(
        db_session,
        UserChallenge(
            challenge_id=challenge.id,
            auth_id="someone-else",
            progress=0,
            status=UserChallengeStatus.IN_PROGRESS,
        ),
    )

    response = await rewards_client.post(f"/challenges/{challenge.id}/join")

    assert response.status_code == 400
    assert response.json()["code"] == "challenge_full"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_join_future_challenge(rewards_client, db_session, member_profile):
    challenge = await _add(
        db_session,
        ChallengeFactory.create(
            start_date=utc_now() + timedelta(days=1),
            end_date=utc_now() + timedelta(days=8),
        ),
    )

    response = await rewards_client.post(f"/challenges/{challenge.id}/join")

    assert response.status_code == 400
    assert response.json()["code"] == "challenge_not_started"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_challenges_fail_after_end(rewards_client, db_session, member_profile):
    challenge = await _add(
        db_session,
        ChallengeFactory.create(
            start_date=utc_now() - timedelta(days=8),
            end_date=utc_now() - timedelta(days=1),
        ),
    )
    await _add(
        db_session,
        UserChallenge(
            challenge_id=challenge.id,
            auth_id=member_profile.auth_id,
            progress=1,
            status=UserChallengeStatus.IN_PROGRESS,
        ),
    )
    db_session.expunge_all()

    response = await rewards_client.get("/challenges/me")

    assert response.status_code == 200, response.text
    [item] = response.json()
    assert item["participation"]["status"] == "failed"
    assert item["challenge"]["id"] == str(challenge.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_challenge_dates_validated(rewards_client, admin_headers):
    now = utc_now()
    response = await rewards_client.post(
        "/admin/challenges",
        json={
            "title": "Thử thách ngược",
            "challenge_type": "daily",
            "requirement_type": "cups",
            "requirement_value": 1,
            "start_date": now.isoformat(),
            "end_date": (now - timedelta(days=1)).isoformat(),
        },
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_archived_challenge_cannot_be_joined(
    rewards_client, db_session, member_profile, admin_headers
):
    challenge = await _add(db_session, ChallengeFactory.create())

    archived = await rewards_client.delete(
        f"/admin/challenges/{challenge.id}", headers=admin_headers
    )
    assert archived.status_code == 204

    assert (await rewards_client.get("/challenges")).json() == []
    joined = await rewards_client.post(f"/challenges/{challenge.id}/join")
    assert joined.status_code == 400
    assert joined.json()["code"] == "challenge_closed"
