"""
Domain errors raised by the service layer.

Each error carries the HTTP status the request boundary answers with;
the message is passed through to the client unchanged.
"""

from fastapi import status


class DomainError(Exception):
    """Base domain error with a user-safe message."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(DomainError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(DomainError):
    """Caller is not the owning account."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """Unique account field already taken."""

    status_code = status.HTTP_409_CONFLICT


class CapacityExceededError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateRegistrationError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class SchedulingError(DomainError):
    """Registration attempted against a past-dated event."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(DomainError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
