"""Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``app.main`` registers a
single handler that renders them as ``{"detail": message}``.
"""
from fastapi import status


class MarketplaceError(Exception):
    """Base class for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(MarketplaceError):
    """The record is not in a status that allows the requested change."""


class ConflictError(MarketplaceError):
    """Uniqueness violations such as an email already in use."""


class PermissionDeniedError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
