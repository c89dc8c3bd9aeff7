"""Error hierarchy for the trip access core.

Every failure a service can report is a ``TripCrewError`` subclass with a
stable ``code``, a ``category`` and the HTTP status the API layer renders it
with. Services raise them; ``tripcrew.api.error_handlers`` turns them into
``{"error": {...}}`` JSON bodies.

A principal that cannot see a trip gets exactly the same error as one asking
for a trip that does not exist (``TRIP_NOT_FOUND``). ``TripAccessDenied`` is a
subclass of ``TripNotFound`` so callers can tell the cases apart internally
while the rendered response stays identical.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    DATABASE = "database"
    INTERNAL = "internal"


class TripCrewError(Exception):
    """Base exception for all TripCrew errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
            }
        }


# ─── Not found (404) ────────────────────────────────────────────

class TripNotFound(TripCrewError):
    def __init__(self, trip_id: Optional[str] = None):
        super().__init__(
            "Trip not found", "TRIP_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.trip_id = trip_id


class TripAccessDenied(TripNotFound):
    """Principal can see the trip but lacks the level the action needs.

    Rendered exactly like ``TripNotFound``.
    """


class DayNotFound(TripCrewError):
    def __init__(self, day_id: Optional[str] = None):
        super().__init__(
            "Day not found", "DAY_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.day_id = day_id


class ChecklistItemNotFound(TripCrewError):
    def __init__(self, item_id: Optional[str] = None):
        super().__init__(
            "Checklist item not found", "CHECKITEM_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.item_id = item_id


class InviteNotFound(TripCrewError):
    def __init__(self):
        super().__init__(
            "Invite not found", "INVITE_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )


# ─── Business rules / validation (400) ──────────────────────────

class InviteExpired(TripCrewError):
    def __init__(self):
        super().__init__(
            "Invite has expired", "INVITE_EXPIRED",
            ErrorCategory.BUSINESS_RULE, 400,
        )


class InviteExhausted(TripCrewError):
    def __init__(self):
        super().__init__(
            "Invite has already been used", "INVITE_ALREADY_USED",
            ErrorCategory.BUSINESS_RULE, 400,
        )


class InvalidRole(TripCrewError):
    def __init__(self, role=None):
        super().__init__(
            f"Invalid role: {role!r}", "INVALID_ROLE",
            ErrorCategory.VALIDATION, 400,
        )
        self.role = role


class InvalidInviteUsage(TripCrewError):
    def __init__(self, usage=None):
        super().__init__(
            f"Invalid invite usage: {usage!r}", "INVALID_INVITE_TYPE",
            ErrorCategory.VALIDATION, 400,
        )
        self.usage = usage


class MissingField(TripCrewError):
    def __init__(self, field: str):
        super().__init__(
            f"Field '{field}' is required", f"{field.upper()}_REQUIRED",
            ErrorCategory.VALIDATION, 400,
        )
        self.field = field


class NoFieldsToUpdate(TripCrewError):
    def __init__(self):
        super().__init__(
            "No fields to update", "NO_FIELDS_TO_UPDATE",
            ErrorCategory.VALIDATION, 400,
        )


# ─── Authentication (401) ───────────────────────────────────────

class Unauthorized(TripCrewError):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION, 401,
        )


# ─── Infrastructure (503) ───────────────────────────────────────

class StorageUnavailable(TripCrewError):
    def __init__(self, operation: str = "unknown"):
        super().__init__(
            f"Storage {operation} failed", "STORAGE_UNAVAILABLE",
            ErrorCategory.DATABASE, 503,
        )
        self.operation = operation
