"""Unit tests for point, fee and rank rules.

Pure functions only; no database involved.
"""

from datetime import datetime, timedelta, timezone

import pytest
from libs.common.gamification import (
    GamificationConfig,
    RankLevel,
    borrow_limit,
    compute_due_time,
    compute_late_fee,
    compute_rank,
    compute_refund,
    compute_return_points,
    compute_streak_voucher,
    ebike_fare,
    ebike_points,
    game_reward,
    is_overdue,
    mobility_points,
    overdue_hours,
    rank_progress,
    split_commission,
    water_tree,
)

BORROWED = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
CONFIG = GamificationConfig()


# ---------------------------------------------------------------------------
# Return points
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_due_time_is_borrow_plus_duration():
    assert compute_due_time(BORROWED, CONFIG) == BORROWED + timedelta(hours=24)


@pytest.mark.unit
def test_speed_return_earns_top_tier():
    due = compute_due_time(BORROWED, CONFIG)
    returned = BORROWED + timedelta(minutes=30)
    assert compute_return_points(BORROWED, returned, due, CONFIG) == 200


@pytest.mark.unit
def test_speed_window_is_exclusive():
    due = compute_due_time(BORROWED, CONFIG)
    returned = BORROWED + timedelta(hours=1)
    assert compute_return_points(BORROWED, returned, due, CONFIG) == 50


@pytest.mark.unit
def test_return_exactly_at_due_time_is_on_time():
    due = compute_due_time(BORROWED, CONFIG)
    assert compute_return_points(BORROWED, due, due, CONFIG) == 50
    assert compute_late_fee(due, due, CONFIG) == 0


@pytest.mark.unit
def test_late_return_earns_late_tier():
    due = compute_due_time(BORROWED, CONFIG)
    returned = due + timedelta(minutes=1)
    assert compute_return_points(BORROWED, returned, due, CONFIG) == 20


@pytest.mark.unit
def test_naive_datetimes_are_treated_as_utc():
    due = compute_due_time(BORROWED, CONFIG)
    naive_return = (BORROWED + timedelta(minutes=10)).replace(tzinfo=None)
    assert compute_return_points(BORROWED, naive_return, due, CONFIG) == 200


# ---------------------------------------------------------------------------
# Late fees and refunds
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "overdue, expected_fee",
    [
        (timedelta(0), 0),
        (timedelta(hours=1), 5000),
        (timedelta(hours=24), 5000),
        (timedelta(hours=24, seconds=1), 10000),
    ],
)
def test_late_fee_tiers(overdue, expected_fee):
    due = compute_due_time(BORROWED, CONFIG)
    assert compute_late_fee(due, due + overdue, CONFIG) == expected_fee


@pytest.mark.unit
def test_refund_never_negative():
    assert compute_refund(10000, 5000) == 5000
    assert compute_refund(10000, 10000) == 0
    assert compute_refund(10000, 15000) == 0


@pytest.mark.unit
def test_overdue_hours_rounds_up():
    due = compute_due_time(BORROWED, CONFIG)
    assert overdue_hours(due, due) == 0
    assert overdue_hours(due, due + timedelta(minutes=61)) == 2
    assert is_overdue(due, due + timedelta(seconds=1))
    assert not is_overdue(due, due)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_streak_voucher_issued_at_threshold():
    assert compute_streak_voucher(4, CONFIG) is None
    voucher = compute_streak_voucher(5, CONFIG)
    assert voucher is not None
    assert voucher.discount_percent == 10
    assert voucher.streak_length == 5


@pytest.mark.unit
def test_streak_voucher_disabled_when_threshold_zero():
    config = GamificationConfig(streak_voucher_after=0)
    assert compute_streak_voucher(50, config) is None


# ---------------------------------------------------------------------------
# Ranks
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "points, rank",
    [
        (0, RankLevel.SEED),
        (99, RankLevel.SEED),
        (100, RankLevel.SPROUT),
        (499, RankLevel.SPROUT),
        (500, RankLevel.SAPLING),
        (2000, RankLevel.TREE),
        (5000, RankLevel.FOREST),
        (999999, RankLevel.FOREST),
    ],
)
def test_rank_thresholds(points, rank):
    assert compute_rank(points) == rank


@pytest.mark.unit
def test_rank_order_comparisons():
    assert RankLevel.SEED < RankLevel.FOREST
    assert RankLevel.TREE >= RankLevel.SAPLING
    assert max([RankLevel.SPROUT, RankLevel.TREE, RankLevel.SEED]) == RankLevel.TREE


@pytest.mark.unit
def test_borrow_limit_grows_with_rank():
    assert borrow_limit(RankLevel.SEED) == 1
    assert borrow_limit(RankLevel.FOREST) == 5


@pytest.mark.unit
def test_rank_progress_midway():
    progress = rank_progress(300)
    assert progress.rank == RankLevel.SPROUT
    assert progress.next_rank == RankLevel.SAPLING
    assert progress.points_to_next == 200
    assert progress.progress_percent == 50


@pytest.mark.unit
def test_rank_progress_top_rank():
    progress = rank_progress(8000)
    assert progress.rank == RankLevel.FOREST
    assert progress.next_rank is None
    assert progress.progress_percent == 100


# ---------------------------------------------------------------------------
# Fares, commission, mini-games
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_commission_shares_sum_to_amount():
    commission, partner = split_commission(45000, 0.001)
    assert commission == 45
    assert commission + partner == 45000


@pytest.mark.unit
def test_commission_rounds_half_up():
    assert split_commission(500, 0.001) == (1, 499)
    assert split_commission(400, 0.001) == (0, 400)


@pytest.mark.unit
def test_ebike_fare_table():
    assert ebike_fare(1, CONFIG) == 20000
    assert ebike_fare(24, CONFIG) == 120000
    assert ebike_fare(2, CONFIG) is None


@pytest.mark.unit
def test_trip_points():
    assert mobility_points(0.4) == 1
    assert mobility_points(7.9) == 7
    assert ebike_points(5) == 7


@pytest.mark.unit
def test_game_rewards_are_capped():
    assert game_reward("cup_catch", 250) == 25
    assert game_reward("cup_catch", 10000) == 50
    assert game_reward("eco_quiz", 4) == 20
    assert game_reward("eco_quiz", 40) == 100
    assert game_reward("unknown", 10) == 0


@pytest.mark.unit
def test_watering_levels_up_tree():
    assert water_tree(1, 0) == (1, 10, 0)
    assert water_tree(1, 90) == (2, 0, 50)
