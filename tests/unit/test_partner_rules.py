"""Unit tests for redistribution planning and payment setting masking."""

import pytest
from services.partners_service.models import OrderPriority
from services.partners_service.services.payment_settings_ops import mask_value
from services.partners_service.services.redistribution_ops import (
    StoreStock,
    haversine_km,
    plan_redistribution,
)
from tests.factories import StoreFactory

# Roughly 1.1 km apart in District 10 / District 1, plus one far away in Thu Duc.
NEAR = (10.7725, 106.6580)
NEARBY = (10.7769, 106.6681)
FAR = (10.8700, 106.8030)


def _stock(available, coords, name="Store"):
    lat, lng = coords
    store = StoreFactory.create(name=name, gps_lat=lat, gps_lng=lng)
    return StoreStock(store=store, available=available)


# ---------------------------------------------------------------------------
# Distance
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_haversine_zero_for_same_point():
    assert haversine_km(*NEAR, *NEAR) == 0


@pytest.mark.unit
def test_haversine_known_distance():
    # Ho Chi Minh City to Hanoi is roughly 1,140 km great-circle
    distance = haversine_km(10.7769, 106.7009, 21.0278, 105.8342)
    assert 1100 < distance < 1200


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_low_store_paired_with_nearest_excess_store():
    low = _stock(3, NEAR, "Low")
    near_source = _stock(80, NEARBY, "Near source")
    far_source = _stock(100, FAR, "Far source")

    [rec] = plan_redistribution([low, near_source, far_source])

    assert rec.to_store is low.store
    assert rec.from_store is near_source.store
    assert rec.quantity == 20
    assert rec.priority == OrderPriority.HIGH
    assert rec.distance_km == round(rec.distance_km, 1)


@pytest.mark.unit
def test_store_at_threshold_is_neither_low_nor_excess():
    assert plan_redistribution([_stock(10, NEAR), _stock(50, NEARBY)]) == []


@pytest.mark.unit
def test_transfer_capped_per_order():
    low = _stock(5, NEAR)
    source = _stock(51, NEARBY)

    [rec] = plan_redistribution([low, source])

    assert rec.quantity == 20


@pytest.mark.unit
def test_each_low_store_gets_its_nearest_source():
    low_a = _stock(1, NEAR, "A")
    low_b = _stock(2, FAR, "B")
    city_source = _stock(90, NEARBY, "City")
    suburb_source = _stock(58, (10.8690, 106.8020), "Suburb")

    recs = plan_redistribution([low_a, low_b, city_source, suburb_source])

    pairs = {r.to_store.name: r.from_store.name for r in recs}
    assert pairs == {"A": "City", "B": "Suburb"}
    assert all(r.priority == OrderPriority.HIGH for r in recs)


@pytest.mark.unit
def test_no_recommendations_without_excess():
    assert plan_redistribution([_stock(2, NEAR), _stock(40, NEARBY)]) == []


# ---------------------------------------------------------------------------
# Masking
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_mask_keeps_last_four():
    assert mask_value("sk_live_abcdef1234") == "**************1234"


@pytest.mark.unit
def test_mask_short_values_fully():
    assert mask_value("1234") == "****"
    assert mask_value("") == ""
