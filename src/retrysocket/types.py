"""retrysocket type definitions."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, TypedDict, Union

# Close codes (RFC 6455 section 7.4)
CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001
CLOSE_ABNORMAL = 1006
CLOSE_INTERNAL_ERROR = 1011


class ConnectionState(str, Enum):
    """Lifecycle state of a RetrySocket."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    RETRYING = "retrying"
    CLOSED = "closed"


class EventKind(str, Enum):
    """Event kinds a handler can be registered for."""

    OPEN = "open"
    MESSAGE = "message"
    ERROR = "error"
    CLOSE = "close"


class OpenInfo(TypedDict):
    """Snapshot passed to the open handler."""

    open_count: int
    close_count: int
    reconnect: bool
    retry_attempts_used: int


class ReconnectOptions(TypedDict, total=False):
    """Object form of the ``reconnect`` option."""

    type: str
    max_attempts: int
    interval: float


class QueueOptions(TypedDict, total=False):
    """Object form of the ``queue_messages`` option."""

    type: str


ReconnectSetting = Union[bool, str, ReconnectOptions, None]
QueueSetting = Union[bool, str, QueueOptions, None]

Handler = Callable[..., Any]
TransportFactory = Callable[[str, Any, Any], Any]
