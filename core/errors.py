"""
Error taxonomy for the check-in core.

Every failure the core reports is a ``CheckinError`` carrying a stable ``kind``
string, the HTTP status the adapter should use, and whether a caller may
safely retry the same request.
"""

from fastapi import status


class CheckinError(Exception):
    kind = "checkin_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = False
    default_message = "Check-in operation failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Validation (caller-fixable) ---


class InvalidCoordinate(CheckinError):
    kind = "invalid_coordinate"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Latitude must be within [-90, 90] and longitude within [-180, 180]."


class InvalidDate(CheckinError):
    kind = "invalid_date"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid date format. Use YYYY-MM-DD"


# --- Invariant violations (expected, surfaced as-is) ---


class AlreadyCheckedIn(CheckinError):
    kind = "already_checked_in"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You already have an active check-in. Please check out first."


class NoActiveCheckin(CheckinError):
    kind = "no_active_checkin"
    status_code = status.HTTP_409_CONFLICT
    default_message = "No active check-in found."


# --- Authorization (never reveal whether the entity exists) ---


class NotAuthorizedForClient(CheckinError):
    kind = "not_authorized_for_client"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not assigned to this client."


class Forbidden(CheckinError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Manager access required."


# --- Store failures ---


class LedgerTimeout(CheckinError):
    kind = "timeout"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
    default_message = "The check-in store did not respond in time. Please retry."


class LedgerUnavailable(CheckinError):
    kind = "store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
    default_message = "The check-in store is unavailable. Please retry."


class StoreRejected(CheckinError):
    # A constraint other than the one-active-check-in index refused the write
    kind = "store_rejected"
    status_code = status.HTTP_409_CONFLICT
    default_message = "The check-in store rejected the change."


class Indeterminate(CheckinError):
    # Commit outcome unknown: the caller must re-read current state, not resubmit
    kind = "indeterminate"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = (
        "The request may or may not have been saved. "
        "Check your current status before trying again."
    )
