"""QR payloads printed on cups and other SipSmart assets.

Payload format: ``{ENTITY}|{identifier}|{subtype}|SipSmart``, e.g.
``CUP|12345678|pp_plastic|SipSmart``. Scanners also accept the legacy
``CupSipSmart`` suffix, a bare 8-digit cup id, or a URL carrying ``cup_id``.
"""

import io
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from libs.common.errors import ValidationFailed

BRAND_SUFFIX = "SipSmart"
LEGACY_SUFFIXES = ("CupSipSmart",)

_CUP_ID = re.compile(r"^\d{8}$")
_UUID = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


@dataclass(frozen=True)
class QRPayload:
    entity: str
    identifier: str
    subtype: Optional[str] = None


def is_valid_identifier(identifier: str) -> bool:
    return bool(_CUP_ID.match(identifier) or _UUID.match(identifier))


def build_payload(entity: str, identifier: str, subtype: str) -> str:
    if not is_valid_identifier(identifier):
        raise ValidationFailed(f"Invalid identifier for QR payload: {identifier}")
    return f"{entity.upper()}|{identifier}|{subtype}|{BRAND_SUFFIX}"


def build_cup_payload(cup_id: str, material: str) -> str:
    return build_payload("CUP", cup_id, material)


def parse_payload(raw: str) -> QRPayload:
    """Parse scanned text into a payload; raises ``ValidationFailed``."""
    text = (raw or "").strip()
    if not text:
        raise ValidationFailed("Empty QR code")

    if _CUP_ID.match(text):
        return QRPayload(entity="CUP", identifier=text)

    if text.startswith(("http://", "https://")):
        params = parse_qs(urlparse(text).query)
        cup_id = (params.get("cup_id") or params.get("cupId") or [None])[0]
        if cup_id and _CUP_ID.match(cup_id):
            return QRPayload(entity="CUP", identifier=cup_id)
        raise ValidationFailed("Invalid QR code")

    parts = text.split("|")
    if len(parts) != 4 or parts[3] not in (BRAND_SUFFIX, *LEGACY_SUFFIXES):
        raise ValidationFailed("Invalid QR code")

    entity, identifier, subtype = parts[0].upper(), parts[1], parts[2]
    if not is_valid_identifier(identifier):
        raise ValidationFailed("Invalid QR code")
    return QRPayload(entity=entity, identifier=identifier, subtype=subtype or None)


def render_png(payload: str, box_size: int = 10, border: int = 4) -> bytes:
    """Render a payload as PNG bytes."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
