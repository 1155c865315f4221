"""retrysocket: reconnect-and-replay layer for message-oriented sockets."""

from retrysocket.config import (
    register_message_queue,
    register_retry_policy,
    resolve_message_queue,
    resolve_retry_policy,
)
from retrysocket.errors import (
    ConfigurationError,
    NotConnectedError,
    ReconnectError,
    RetrySocketError,
    SocketClosedError,
    TransportClosedError,
)
from retrysocket.message_queue import MessageQueue, SimpleQueue
from retrysocket.retry import IntervalRetryPolicy, RetryPolicy
from retrysocket.retry_socket import RetrySocket, RetrySocketBuilder, open_socket
from retrysocket.transport import Transport, standardize
from retrysocket.types import (
    ConnectionState,
    EventKind,
    OpenInfo,
    QueueOptions,
    ReconnectOptions,
)

__all__ = [
    # Core classes
    "RetrySocket",
    "RetrySocketBuilder",
    "open_socket",
    # Errors
    "RetrySocketError",
    "ConfigurationError",
    "NotConnectedError",
    "ReconnectError",
    "SocketClosedError",
    "TransportClosedError",
    # Strategies
    "RetryPolicy",
    "IntervalRetryPolicy",
    "MessageQueue",
    "SimpleQueue",
    "register_retry_policy",
    "register_message_queue",
    "resolve_retry_policy",
    "resolve_message_queue",
    # Transports
    "Transport",
    "standardize",
    # Types
    "ConnectionState",
    "EventKind",
    "OpenInfo",
    "ReconnectOptions",
    "QueueOptions",
]
