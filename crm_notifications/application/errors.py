"""Errors raised by the application use cases.

Routes map each class to an HTTP status; see
``crm_notifications.interfaces.api.errors``.
"""

from __future__ import annotations


class ApplicationError(Exception):
    """Base class for errors surfaced to API clients."""

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ApplicationError, ValueError):
    """A required field is missing or malformed."""


class AuthenticationError(ApplicationError):
    """The caller could not be authenticated."""


class NotificationAccessError(ApplicationError):
    """The caller does not own the targeted notification."""


class NotFoundError(ApplicationError):
    """The referenced entity does not exist."""


class NotificationNotFoundError(NotFoundError):
    pass


class StoreError(ApplicationError):
    """The database operation itself failed."""


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "NotFoundError",
    "NotificationAccessError",
    "NotificationNotFoundError",
    "StoreError",
    "ValidationError",
]
