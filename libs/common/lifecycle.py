"""Legal state transitions for cups, cup transactions, rentals, eKYC and
redistribution orders."""

from libs.common.errors import InvalidTransition

CUP_TRANSITIONS: dict[str, set[str]] = {
    "available": {"in_use", "lost", "cleaning"},
    "in_use": {"cleaning", "available", "lost"},
    "cleaning": {"available", "lost"},
    "lost": {"available"},
}

TRANSACTION_TRANSITIONS: dict[str, set[str]] = {
    "ongoing": {"completed", "overdue", "cancelled"},
    "overdue": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

RENTAL_TRANSITIONS: dict[str, set[str]] = {
    "requested": {"active", "cancelled"},
    "active": {"completed"},
    "completed": set(),
    "cancelled": set(),
}

REDISTRIBUTION_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"in_transit", "cancelled"},
    "in_transit": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

EKYC_TRANSITIONS: dict[str, set[str]] = {
    "none": {"pending", "approved"},
    "pending": {"approved", "rejected"},
    "rejected": {"pending", "approved"},
    # Only once the approval has expired.
    "approved": {"pending", "approved"},
}

_TABLES = {
    "cup": CUP_TRANSITIONS,
    "transaction": TRANSACTION_TRANSITIONS,
    "rental": RENTAL_TRANSITIONS,
    "ekyc": EKYC_TRANSITIONS,
    "redistribution": REDISTRIBUTION_TRANSITIONS,
}

OPEN_TRANSACTION_STATUSES = ("ongoing", "overdue")


def _value(state) -> str:
    return getattr(state, "value", state)


def can_transition(entity: str, current, target) -> bool:
    return _value(target) in _TABLES[entity].get(_value(current), set())


def ensure_transition(entity: str, current, target) -> None:
    """Raise ``InvalidTransition`` unless ``current -> target`` is legal."""
    if not can_transition(entity, current, target):
        raise InvalidTransition(entity, _value(current), _value(target))
