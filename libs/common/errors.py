"""Domain errors shared by every SipSmart service.

Each error is an ``HTTPException`` carrying a stable machine-readable ``code``
so handlers can render ``{"error": ..., "code": ...}`` bodies.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for errors raised by business operations."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_message = "Bad request"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=self.status_code, detail=message or self.default_message
        )
        if code:
            self.code = code
        self.extra = extra or {}

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationFailed(DomainError):
    code = "validation_error"
    default_message = "Invalid request"


class NotAuthenticated(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Authentication required"


class PermissionDenied(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Permission denied"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class StateConflict(DomainError):
    """A precondition on current state is not met."""

    code = "state_conflict"
    default_message = "Operation not allowed in the current state"


class CupNotAvailable(StateConflict):
    code = "cup_not_available"
    default_message = "Cup is not available"


class InsufficientBalance(StateConflict):
    code = "insufficient_balance"
    default_message = "Insufficient wallet balance"


class NoActiveTransaction(StateConflict):
    code = "no_active_transaction"
    default_message = "No active transaction for this cup"


class BorrowLimitReached(StateConflict):
    code = "borrow_limit_reached"
    default_message = "Borrow limit reached for your rank"


class InsufficientPoints(StateConflict):
    code = "insufficient_points"
    default_message = "Insufficient points"


class OutOfStock(StateConflict):
    code = "out_of_stock"
    default_message = "Reward out of stock"


class DuplicateVerification(StateConflict):
    code = "duplicate_verification"
    default_message = "Verification already submitted"


class InvalidTransition(StateConflict):
    code = "invalid_transition"

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


class UpstreamError(DomainError):
    """Storage, provider or database failure. Message stays generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "upstream_error"
    default_message = "Upstream service failure"
