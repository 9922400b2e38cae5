"""Unit tests for QR payload parsing and environmental impact math."""

import pytest
from libs.common.errors import ValidationFailed
from libs.common.impact import compute_co2_saved, trees_equivalent, trip_co2
from libs.common.qr import build_cup_payload, parse_payload, render_png

# ---------------------------------------------------------------------------
# QR payloads
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_cup_payload_format():
    assert build_cup_payload("12345678", "pp_plastic") == "CUP|12345678|pp_plastic|SipSmart"


@pytest.mark.unit
def test_build_rejects_malformed_cup_id():
    with pytest.raises(ValidationFailed):
        build_cup_payload("1234", "pp_plastic")


@pytest.mark.unit
def test_parse_full_payload():
    payload = parse_payload("CUP|12345678|bamboo_fiber|SipSmart")
    assert payload.entity == "CUP"
    assert payload.identifier == "12345678"
    assert payload.subtype == "bamboo_fiber"


@pytest.mark.unit
def test_parse_accepts_legacy_suffix():
    payload = parse_payload("cup|87654321|pp_plastic|CupSipSmart")
    assert payload.entity == "CUP"
    assert payload.identifier == "87654321"


@pytest.mark.unit
def test_parse_bare_cup_id():
    payload = parse_payload("  12345678 ")
    assert payload.entity == "CUP"
    assert payload.subtype is None


@pytest.mark.unit
def test_parse_url_with_cup_id():
    payload = parse_payload("https://sipsmart.vn/scan?cup_id=12345678")
    assert payload.identifier == "12345678"


@pytest.mark.unit
def test_parse_store_payload_with_uuid():
    store_id = "0b9f3c1e-7a52-4c1b-9d2e-3f4a5b6c7d8e"
    payload = parse_payload(f"STORE|{store_id}|cafe|SipSmart")
    assert payload.entity == "STORE"
    assert payload.identifier == store_id


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "",
        "CUP|12345678|pp_plastic|OtherBrand",
        "CUP|12345678|SipSmart",
        "CUP|1234|pp_plastic|SipSmart",
        "https://sipsmart.vn/scan?cup_id=abc",
    ],
)
def test_parse_rejects_invalid(raw):
    with pytest.raises(ValidationFailed):
        parse_payload(raw)


@pytest.mark.unit
def test_render_png_produces_png_bytes():
    png = render_png(build_cup_payload("12345678", "pp_plastic"))
    assert png.startswith(b"\x89PNG")


# ---------------------------------------------------------------------------
# Impact
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_cups_only_impact():
    summary = compute_co2_saved(cups_reused=10, km_traveled_green=0)
    assert summary.co2_saved_kg == 0.5
    assert summary.plastic_avoided_g == 150
    assert summary.trees_equivalent == 0


@pytest.mark.unit
def test_combined_impact_with_transit_rate():
    summary = compute_co2_saved(cups_reused=100, km_traveled_green=100, co2_per_km=0.12)
    assert summary.co2_saved_kg == 17.0
    assert summary.trees_equivalent == 1


@pytest.mark.unit
def test_trees_equivalent_floors():
    assert trees_equivalent(16.99) == 0
    assert trees_equivalent(34) == 2


@pytest.mark.unit
def test_trip_co2_rounds_to_grams():
    assert trip_co2(3.3333, 0.15) == 0.5
