"""Unit tests for green point and streak bookkeeping in profile_ops.

``other_session`` plays a second request working on the same profile.
"""

import pytest
from libs.common.errors import InsufficientPoints
from services.users_service.models import GreenPointEntry, PointSource, RankLevel, UserProfile
from services.users_service.services.profile_ops import (
    award_points,
    get_profile,
    register_return,
    spend_points,
)
from sqlalchemy import select
from tests.factories import UserProfileFactory


async def _make_profile(db, **overrides):
    profile = UserProfileFactory.create(**overrides)
    db.add(profile)
    await db.commit()
    return profile


async def _points_row(db, auth_id):
    result = await db.execute(
        select(UserProfile.green_points, UserProfile.lifetime_green_points).where(
            UserProfile.auth_id == auth_id
        )
    )
    return result.one()


# ---------------------------------------------------------------------------
# award_points / spend_points
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_moves_both_balances_and_rank(db_session):
    profile = await _make_profile(
        db_session, auth_id="auth-award", green_points=80, lifetime_green_points=80
    )

    entry = await award_points(
        db_session, profile, 30, source=PointSource.CUP_RETURN, description="Trả ly"
    )
    await db_session.commit()

    assert entry.amount == 30
    assert entry.balance_after == 110
    assert profile.rank_level == RankLevel.SPROUT
    assert tuple(await _points_row(db_session, "auth-award")) == (110, 110)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_ignores_non_positive_amounts(db_session):
    profile = await _make_profile(db_session, green_points=10, lifetime_green_points=10)

    assert (
        await award_points(db_session, profile, 0, source=PointSource.TREE, description="x")
        is None
    )
    entries = await db_session.execute(select(GreenPointEntry.id))
    assert entries.first() is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_award_keeps_a_spend_committed_meanwhile(db_session, other_session):
    """A return loaded the profile before a reward claim spent points."""
    profile = await _make_profile(
        db_session, auth_id="auth-race", green_points=500, lifetime_green_points=400
    )

    theirs = await get_profile(other_session, "auth-race")
    await spend_points(
        other_session, theirs, 300, source=PointSource.REWARD_CLAIM, description="Đổi quà"
    )
    await other_session.commit()

    entry = await award_points(
        db_session, profile, 150, source=PointSource.CUP_RETURN, description="Trả ly"
    )
    await db_session.commit()

    assert tuple(await _points_row(db_session, "auth-race")) == (350, 550)
    assert entry.balance_after == 350
    assert profile.green_points == 350
    assert profile.rank_level == RankLevel.SAPLING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_spend_refuses_overdraw(db_session):
    profile = await _make_profile(
        db_session, auth_id="auth-poor", green_points=40, lifetime_green_points=900
    )

    with pytest.raises(InsufficientPoints):
        await spend_points(
            db_session, profile, 41, source=PointSource.REWARD_CLAIM, description="Đổi quà"
        )

    assert profile.green_points == 40


# ---------------------------------------------------------------------------
# register_return
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_on_time_returns_extend_streak_and_best(db_session):
    profile = await _make_profile(db_session, green_streak=2, best_streak=2)

    streak = await register_return(db_session, profile, on_time=True)

    assert streak == 3
    assert profile.best_streak == 3
    assert profile.total_cups_saved == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_late_return_resets_streak_keeps_best(db_session):
    profile = await _make_profile(db_session, green_streak=4, best_streak=6)

    streak = await register_return(db_session, profile, on_time=False)

    assert streak == 0
    assert profile.best_streak == 6
    assert profile.total_cups_saved == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_returns_both_count(db_session, other_session):
    profile = await _make_profile(
        db_session, auth_id="auth-two-cups", green_streak=2, best_streak=2
    )

    theirs = await get_profile(other_session, "auth-two-cups")
    await register_return(other_session, theirs, on_time=True)
    await other_session.commit()

    streak = await register_return(db_session, profile, on_time=True)
    await db_session.commit()

    assert streak == 4
    assert profile.best_streak == 4
    assert profile.total_cups_saved == 2
