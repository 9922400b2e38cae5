"""Shared helpers for cups routers."""

from libs.common.errors import ValidationFailed
from libs.common.qr import parse_payload
from services.cups_service.models import Store
from services.cups_service.schemas import StoreInventory, StoreResponse


def resolve_cup_id(raw: str) -> str:
    """Accept a bare cup id or any supported QR payload."""
    payload = parse_payload(raw)
    if payload.entity != "CUP" or not payload.identifier.isdigit():
        raise ValidationFailed("QR code does not belong to a cup")
    return payload.identifier


def store_to_response(store: Store, counts: dict[str, int]) -> StoreResponse:
    response = StoreResponse.model_validate(store)
    response.inventory = StoreInventory(**counts)
    return response
