"""Exceptions shared by the wizard, the notification service and the adapters."""

from __future__ import annotations


class OrderError(RuntimeError):
    """Base error carrying the HTTP status the function handler should answer with."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(OrderError):
    status_code = 401


class NotificationError(OrderError):
    """Discord-side failure while creating a channel or posting a message."""

    def __init__(
        self,
        message: str,
        *,
        details: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.details = details


class PersistenceError(OrderError):
    pass


class OrderIdConflictError(PersistenceError):
    """An order with the same human-readable id already exists."""

    status_code = 409
