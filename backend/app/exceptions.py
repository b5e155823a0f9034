"""Domain exceptions shared by services, stores and routers.

Each exception carries the HTTP status it maps to; ``app.main`` renders them
as ``{"message": ..., "errors": {...}}`` JSON bodies.
"""

from fastapi import status


class EstateProError(Exception):
    """Base class for errors that are surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error. Please try again later."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(EstateProError):
    """One or more input fields are missing or malformed.

    ``errors`` maps every offending field to a human-readable message so a
    caller can fix all of them in one round-trip.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: dict[str, str], message: str | None = None) -> None:
        self.errors = errors
        super().__init__(message)


class ConflictError(EstateProError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class ForbiddenError(EstateProError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied. Admin privileges required."


class NotFoundError(EstateProError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidCredentialsError(EstateProError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class AccountLockedError(EstateProError):
    status_code = status.HTTP_423_LOCKED
    default_message = "Account is temporarily locked due to too many failed login attempts"


class PersistenceError(EstateProError):
    """The durable write behind a store operation failed."""

    default_message = "Could not save changes. Please try again later."


class MixedCurrencyError(ValueError):
    """Raised when amounts in different currencies would be summed together."""
