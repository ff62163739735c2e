"""
Service Errors - Business rule violations raised by services

Every error subclasses ValueError so callers that catch ValueError keep
working. The app maps each class to its HTTP status in one handler.
"""

from fastapi import status


class ServiceError(ValueError):
    """Base business-rule error."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDeniedError(ServiceError):
    """Caller is authenticated but not allowed (not admin, not owner)."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    """Referenced record does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(ServiceError):
    """Record exists but is not in a state that allows the transition."""
    status_code = status.HTTP_409_CONFLICT


class InvariantViolationError(ServiceError):
    """Mutation would break a hard invariant (e.g. removing the primary admin)."""
    status_code = status.HTTP_400_BAD_REQUEST
