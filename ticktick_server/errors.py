"""Exceptions raised by the TickTick server."""

from __future__ import annotations


def _status_line(status_code: int, reason: str | None) -> str:
    return f"{status_code} {reason}" if reason else str(status_code)


class TickTickError(Exception):
    """Base class for all TickTick server errors."""


class ConfigurationError(TickTickError):
    """Raised when no usable credential is configured."""


class AuthenticationError(TickTickError):
    """Raised when a credential exchange is rejected or yields no token."""

    def __init__(
        self,
        status_code: int | None,
        reason: str | None,
        detail: str,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        if status_code is None:
            message = f"Authentication failed: {detail}"
        else:
            message = f"Authentication failed: {_status_line(status_code, reason)} - {detail}"
        super().__init__(message)


class RemoteError(TickTickError):
    """Raised when a TickTick API call fails.

    Carries the failing operation plus whatever the transport reported:
    status code and reason for HTTP errors, the error message otherwise.
    """

    def __init__(
        self,
        operation: str,
        status_code: int | None,
        detail: str,
        reason: str | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        if status_code is None:
            message = f"Failed to {operation}: {detail}"
        else:
            message = f"Failed to {operation}: {_status_line(status_code, reason)} - {detail}"
        super().__init__(message)
