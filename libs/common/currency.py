"""Currency helpers for SipSmart.

All money is stored and transported as integer Vietnamese đồng (VND); there is
no minor unit. Fractional intermediate values (commission) are rounded half-up.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_vnd(amount: float | Decimal) -> int:
    """Round a fractional amount to whole đồng (half-up)."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_vnd(amount: int) -> str:
    """Format for display, e.g. ``10000`` -> ``10.000₫``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):,}".replace(",", ".") + "₫"
