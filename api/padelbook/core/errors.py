"""Error kinds raised by the reservation core.

Every error carries a machine-readable rule and a human-readable message.
Routes turn them into HTTPExceptions with the same detail shape used for
booking rule violations: [{"rule": ..., "message": ...}].
"""

from fastapi import HTTPException, status


class ReservationError(Exception):
    """Base class for all reservation errors."""

    rule = "reservation_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, rule: str | None = None):
        self.message = message
        if rule is not None:
            self.rule = rule
        super().__init__(message)


class ConfigurationMissing(ReservationError):
    """Required configuration is absent. Fatal to startup."""

    rule = "configuration_missing"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class AuthenticationFailed(ReservationError):
    rule = "authentication_failed"
    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(ReservationError):
    """Invalid member number, email, or missing consent. Re-prompt the user."""

    rule = "validation"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class SelectionRuleViolation(ReservationError):
    """Non-adjacent slot, block too long, own-slot conflict. State is unchanged."""

    rule = "selection"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class AvailabilityConflict(ReservationError):
    """No single court is free across the block any more. Re-select."""

    rule = "availability_conflict"
    status_code = status.HTTP_409_CONFLICT


class PersistenceFailure(ReservationError):
    """A write or delete failed. Nothing is assumed to have changed."""

    rule = "persistence_failure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class NotReservationOwner(ReservationError):
    rule = "not_owner"
    status_code = status.HTTP_403_FORBIDDEN


def to_http_exception(exc: ReservationError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail=[{"rule": exc.rule, "message": exc.message}],
    )
