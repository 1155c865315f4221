"""retrysocket error types."""

from __future__ import annotations


class RetrySocketError(Exception):
    """Base error for all retrysocket errors."""


class ConfigurationError(RetrySocketError):
    """Unrecognized policy/queue type or invalid option values."""


class ReconnectError(RetrySocketError):
    """Abnormal close details handed to the error handler before a retry.

    Never raised by the library; it is the payload of the ``error`` event
    fired when a disconnect is eligible for reconnection.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None,
        close_count: int,
        open_count: int,
        retry_attempts_used: int,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.close_count = close_count
        self.open_count = open_count
        self.retry_attempts_used = retry_attempts_used

    def __repr__(self) -> str:
        return (
            f"ReconnectError(code={self.code!r}, message={self.message!r}, "
            f"close_count={self.close_count}, open_count={self.open_count}, "
            f"retry_attempts_used={self.retry_attempts_used})"
        )


class NotConnectedError(RetrySocketError):
    """Socket has never been connected."""

    def __init__(self) -> None:
        super().__init__("Socket is not connected")


class SocketClosedError(RetrySocketError):
    """Socket reached its terminal closed state."""

    def __init__(self) -> None:
        super().__init__("Socket is closed")


class TransportClosedError(RetrySocketError):
    """Transport was already closed."""

    def __init__(self) -> None:
        super().__init__("Transport is already closed")
