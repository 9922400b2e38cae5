"""Integration tests for e-bike rentals and bus/metro scan-and-pay."""

import pytest
from services.cups_service.models import PartnerType
from services.mobility_service.models import BikeStatus, Ebike, EbikeRental, RentalStatus
from services.mobility_service.services import ebike_ops
from services.wallet_service.models import Wallet
from sqlalchemy import func, select
from tests.factories import (
    EbikeFactory,
    EbikeStationFactory,
    EkycVerificationFactory,
    StoreFactory,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _station_with_bike(db_session, **station_overrides):
    station = EbikeStationFactory.create(**station_overrides)
    db_session.add(station)
    await db_session.flush()
    bike = EbikeFactory.create(station_id=station.id, bike_code="EB0001")
    db_session.add(bike)
    await db_session.commit()
    return station, bike


async def _verify(db_session, auth_id):
    db_session.add(EkycVerificationFactory.create(auth_id))
    await db_session.commit()


async def _balance(db_session, auth_id) -> int:
    result = await db_session.execute(select(Wallet.balance).where(Wallet.auth_id == auth_id))
    return result.scalar_one()


async def _bike_row(db_session, bike_id):
    result = await db_session.execute(
        select(Ebike.status, Ebike.station_id, Ebike.is_locked, Ebike.total_km).where(
            Ebike.id == bike_id
        )
    )
    return result.one()


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stations_report_availability(mobility_client, db_session):
    station, _ = await _station_with_bike(db_session)
    db_session.add(EbikeFactory.create(station_id=station.id, status=BikeStatus.MAINTENANCE))
    await db_session.commit()

    response = await mobility_client.get("/mobility/stations")

    assert response.status_code == 200, response.text
    [data] = response.json()
    assert data["available_bikes"] == 1
    assert data["free_slots"] == 8

    bikes = await mobility_client.get(f"/mobility/stations/{station.id}/bikes")
    assert [b["bike_code"] for b in bikes.json()] == ["EB0001"]


# ---------------------------------------------------------------------------
# E-bike rentals
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unlock_requires_ekyc(mobility_client, db_session, member_profile):
    station, _ = await _station_with_bike(db_session)

    response = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 1},
    )

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "ekyc_required"
    assert body["action_required"] == "complete_ekyc"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rental_round_trip(mobility_client, db_session, member_profile):
    """Unlock debits the fare, return docks the bike and awards points."""
    station, bike = await _station_with_bike(db_session)
    other = EbikeStationFactory.create(name="Trạm Nhà Văn hóa")
    db_session.add(other)
    await _verify(db_session, member_profile.auth_id)

    unlock = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 1},
    )
    assert unlock.status_code == 200, unlock.text
    data = unlock.json()
    assert data["fare"] == 20000
    assert data["balance"] == 30000

    status, station_id, is_locked, _ = await _bike_row(db_session, bike.id)
    assert status == BikeStatus.IN_USE
    assert station_id is None
    assert is_locked is False

    active = await mobility_client.get("/mobility/ebike/active")
    assert active.json()["status"] == "active"
    assert active.json()["platform_commission"] == 20
    assert active.json()["partner_amount"] == 19980

    returned = await mobility_client.post(
        "/mobility/ebike/return",
        json={
            "rental_id": data["rental_id"],
            "station_id": str(other.id),
            "distance_km": 5.0,
            "battery_level": 70,
        },
    )
    assert returned.status_code == 200, returned.text
    rental = returned.json()
    assert rental["status"] == "completed"
    assert rental["points_earned"] == 7
    assert rental["co2_saved_kg"] == 0.75
    assert rental["end_station_id"] == str(other.id)

    status, station_id, is_locked, total_km = await _bike_row(db_session, bike.id)
    assert status == BikeStatus.AVAILABLE
    assert station_id == other.id
    assert is_locked is True
    assert total_km == 5.0

    await db_session.refresh(member_profile)
    assert member_profile.green_points == 7

    again = await mobility_client.post(
        "/mobility/ebike/return",
        json={"rental_id": data["rental_id"], "station_id": str(other.id), "distance_km": 1},
    )
    assert again.status_code == 400
    assert again.json()["code"] == "rental_not_active"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unlock_rejects_unknown_duration(mobility_client, db_session, member_profile):
    station, _ = await _station_with_bike(db_session)
    await _verify(db_session, member_profile.auth_id)

    response = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 2},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unlock_insufficient_balance(mobility_client, db_session, member_profile):
    station, bike = await _station_with_bike(db_session)
    await _verify(db_session, member_profile.auth_id)
    bike_id = bike.id

    response = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 5},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "insufficient_balance"
    assert response.json()["required"] == 80000
    status, _, _, _ = await _bike_row(db_session, bike_id)
    assert status == BikeStatus.AVAILABLE


@pytest.mark.asyncio
@pytest.mark.integration
async def test_one_rental_at_a_time(mobility_client, db_session, member_profile):
    station, _ = await _station_with_bike(db_session)
    db_session.add(EbikeFactory.create(station_id=station.id, bike_code="EB0002"))
    await _verify(db_session, member_profile.auth_id)

    first = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 1},
    )
    assert first.status_code == 200, first.text

    second = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0002", "station_id": str(station.id), "planned_hours": 1},
    )
    assert second.status_code == 400
    assert second.json()["code"] == "active_rental_exists"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_parallel_unlocks_open_one_rental(
    mobility_client, db_session, other_session, member_profile, monkeypatch
):
    """A second unlock that passed the open-rental check still cannot start a ride."""
    station, bike = await _station_with_bike(db_session)
    ridden = EbikeFactory.create(bike_code="EB0002", status=BikeStatus.IN_USE, is_locked=False)
    db_session.add(ridden)
    await _verify(db_session, "member-1")
    station_id, bike_id, ridden_id = station.id, bike.id, ridden.id
    real_check_balance = ebike_ops.check_balance

    async def check_balance_after_rival_unlock(db, auth_id, amount):
        other_session.add(
            EbikeRental(
                auth_id=auth_id,
                bike_id=ridden_id,
                start_station_id=station_id,
                status=RentalStatus.ACTIVE,
                planned_hours=1,
                fare=20000,
            )
        )
        await other_session.commit()
        return await real_check_balance(db, auth_id, amount)

    monkeypatch.setattr(ebike_ops, "check_balance", check_balance_after_rival_unlock)

    response = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station_id), "planned_hours": 1},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "active_rental_exists"
    status, docked_at, is_locked, _ = await _bike_row(db_session, bike_id)
    assert status == BikeStatus.AVAILABLE
    assert docked_at == station_id
    assert is_locked is True
    assert await _balance(db_session, "member-1") == 50000
    rentals = await db_session.execute(
        select(func.count()).select_from(EbikeRental).where(EbikeRental.auth_id == "member-1")
    )
    assert rentals.scalar() == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_return_to_full_station(mobility_client, db_session, member_profile):
    station, _ = await _station_with_bike(db_session)
    full = EbikeStationFactory.create(name="Trạm đầy", total_slots=1)
    db_session.add(full)
    await db_session.flush()
    db_session.add(EbikeFactory.create(station_id=full.id))
    await _verify(db_session, member_profile.auth_id)

    unlock = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 1},
    )
    response = await mobility_client.post(
        "/mobility/ebike/return",
        json={
            "rental_id": unlock.json()["rental_id"],
            "station_id": str(full.id),
            "distance_km": 2,
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "station_full"


# ---------------------------------------------------------------------------
# Bus / metro
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_scan_and_pay_transit(mobility_client, db_session, member_profile):
    partner = StoreFactory.create(name="Metro Số 1", partner_type=PartnerType.TRANSPORT)
    db_session.add(partner)
    await db_session.commit()

    response = await mobility_client.post(
        "/mobility/scan",
        json={
            "partner_id": str(partner.id),
            "trip_type": "metro",
            "fare": 7000,
            "route_info": {"from": "Bến Thành", "to": "Suối Tiên", "distance_km": 12.5},
        },
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["balance"] == 43000
    trip = data["trip"]
    assert trip["origin"] == "Bến Thành"
    assert trip["points_earned"] == 12
    assert trip["co2_saved_kg"] == 1.5
    assert trip["platform_commission"] == 7
    assert trip["partner_amount"] == 6993
    assert await _balance(db_session, member_profile.auth_id) == 43000

    history = await mobility_client.get("/mobility/trips")
    totals = history.json()["totals"]
    assert totals["trips"] == 1
    assert totals["amount_spent"] == 7000
    assert totals["points_earned"] == 12


@pytest.mark.asyncio
@pytest.mark.integration
async def test_scan_and_pay_rejects_cafe(mobility_client, db_session, member_profile, active_store):
    response = await mobility_client.post(
        "/mobility/scan",
        json={
            "partner_id": str(active_store.id),
            "trip_type": "bus",
            "fare": 7000,
            "route_info": {"from": "A", "to": "B", "distance_km": 3},
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_registers_bike(mobility_client, db_session, admin_headers):
    station, _ = await _station_with_bike(db_session)

    created = await mobility_client.post(
        "/admin/mobility/bikes",
        json={"bike_code": "EB0099", "station_id": str(station.id)},
        headers=admin_headers,
    )
    assert created.status_code == 201, created.text

    duplicate = await mobility_client.post(
        "/admin/mobility/bikes",
        json={"bike_code": "EB0099", "station_id": str(station.id)},
        headers=admin_headers,
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "duplicate_bike_code"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_solar_telemetry(mobility_client, db_session, admin_headers):
    station, _ = await _station_with_bike(db_session)

    response = await mobility_client.put(
        f"/admin/mobility/stations/{station.id}/solar",
        json={"solar_energy_today_kwh": 12.4, "battery_storage_percent": 80},
        headers=admin_headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["solar_energy_today_kwh"] == 12.4
    assert response.json()["battery_storage_percent"] == 80
    assert response.json()["telemetry_updated_at"] is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_archived_station_refuses_unlocks(
    mobility_client, db_session, member_profile, admin_headers
):
    station, _ = await _station_with_bike(db_session)
    await _verify(db_session, member_profile.auth_id)

    archived = await mobility_client.delete(
        f"/admin/mobility/stations/{station.id}", headers=admin_headers
    )
    assert archived.status_code == 204

    assert (await mobility_client.get("/mobility/stations")).json() == []
    unlock = await mobility_client.post(
        "/mobility/ebike/unlock",
        json={"bike_code": "EB0001", "station_id": str(station.id), "planned_hours": 1},
    )
    assert unlock.status_code == 400
    assert unlock.json()["code"] == "station_inactive"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_retires_bike(mobility_client, db_session, admin_headers):
    station, bike = await _station_with_bike(db_session)
    rented = EbikeFactory.create(station_id=None, bike_code="EB0002", status=BikeStatus.IN_USE)
    db_session.add(rented)
    await db_session.commit()
    bike_id = bike.id

    busy = await mobility_client.delete(
        f"/admin/mobility/bikes/{rented.id}", headers=admin_headers
    )
    assert busy.status_code == 400
    assert busy.json()["code"] == "bike_in_use"

    retired = await mobility_client.delete(
        f"/admin/mobility/bikes/{bike_id}", headers=admin_headers
    )
    assert retired.status_code == 204

    db_session.expunge_all()
    status, station_id, is_locked, _ = await _bike_row(db_session, bike_id)
    assert status == BikeStatus.MAINTENANCE
    assert station_id is None
    assert is_locked is True
