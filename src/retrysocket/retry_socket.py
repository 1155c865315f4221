"""Reconnecting socket with pluggable retry policy and outbound message queue."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

from retrysocket.config import resolve_message_queue, resolve_retry_policy
from retrysocket.errors import NotConnectedError, ReconnectError, SocketClosedError
from retrysocket.message_queue import MessageQueue
from retrysocket.retry import RetryPolicy
from retrysocket.transport import Transport, standardize
from retrysocket.types import (
    CLOSE_NORMAL,
    ConnectionState,
    EventKind,
    Handler,
    OpenInfo,
    QueueSetting,
    ReconnectSetting,
    TransportFactory,
)

logger = logging.getLogger("retrysocket.socket")

CLOSED_LOCALLY_REASON = "Socket was closed locally"


def _noop(*_args: Any) -> None:
    pass


class RetrySocket:
    """Socket that reconnects after abnormal closes and replays queued sends.

    Build it from options and connect in one step::

        socket = RetrySocket.create(
            WebSocketImpl,
            "ws://localhost:8080",
            reconnect={"max_attempts": 5, "interval": 1000},
            queue_messages=True,
        )
        socket.on("open", on_open)
        socket.on("message", on_message)
        socket.connect()

    Exactly one handler is kept per event kind; registering another replaces it.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        url: str,
        protocols: str | list[str] | None = None,
        connection_options: Any = None,
    ) -> None:
        self.transport_factory = transport_factory
        self.url = url
        self.protocols = protocols
        self.connection_options = connection_options

        self.connecting = False
        self.closed = False
        self.open_count = 0
        self.close_count = 0

        self._state = ConnectionState.IDLE
        self._transport: Transport | None = None
        self._retry_policy: RetryPolicy | None = None
        self._message_queue: MessageQueue | None = None
        self._handlers: dict[EventKind, Handler] = {kind: _noop for kind in EventKind}

    @staticmethod
    def create(
        transport_factory: TransportFactory,
        url: str,
        *,
        protocols: str | list[str] | None = None,
        connection_options: Any = None,
        reconnect: ReconnectSetting = None,
        queue_messages: QueueSetting = None,
    ) -> RetrySocket:
        """Create an unconnected socket with policy and queue resolved from options.

        Raises ConfigurationError for unrecognized ``reconnect``/``queue_messages`` types.
        """
        socket = RetrySocket(transport_factory, url, protocols, connection_options)
        socket.set_retry_policy(resolve_retry_policy(reconnect))
        socket.set_message_queue(resolve_message_queue(queue_messages))
        return socket

    @staticmethod
    def builder() -> RetrySocketBuilder:
        """Create a new socket builder."""
        return RetrySocketBuilder()

    # -- Configuration --

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def retry_policy(self) -> RetryPolicy | None:
        return self._retry_policy

    @property
    def message_queue(self) -> MessageQueue | None:
        return self._message_queue

    def set_retry_policy(self, policy: RetryPolicy | None) -> None:
        """Set the policy that schedules reconnects; None disables reconnecting."""
        self._retry_policy = policy

    def set_message_queue(self, queue: MessageQueue | None) -> None:
        """Set the buffer for sends issued while connecting; None drops them."""
        self._message_queue = queue

    def on(self, event: str | EventKind, handler: Handler) -> None:
        """Register the handler for ``open``, ``message``, ``error`` or ``close``."""
        self._handlers[EventKind(event)] = handler

    # -- Lifecycle --

    def connect(self) -> RetrySocket:
        """Create a fresh transport and start connecting it.

        Also usable to force a reconnect; a live transport being replaced is
        closed and its later events are ignored.
        """
        if self._state is ConnectionState.CLOSED:
            raise SocketClosedError()

        previous = self._transport
        replacing = self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN)
        if self._state is ConnectionState.RETRYING and self._retry_policy is not None:
            self._retry_policy.cancel()

        self.connecting = True
        self._state = ConnectionState.CONNECTING
        transport = standardize(
            self.transport_factory(self.url, self.protocols, self.connection_options)
        )
        self._transport = transport

        transport.on_open(partial(self._handle_open, transport))
        transport.on_close(partial(self._handle_close, transport))
        transport.on_message(partial(self._handle_message, transport))
        transport.on_error(partial(self._handle_error, transport))

        if previous is not None and replacing:
            _close_quietly(previous, CLOSE_NORMAL, "Reconnecting")

        logger.debug("Connecting to %s", self.url)
        return self

    def send(self, message: Any) -> None:
        """Send now, or queue while connecting (dropped when no queue is set)."""
        if self.connecting:
            if self._message_queue is not None:
                self._message_queue.push(message)
            else:
                logger.debug("Dropping message sent while connecting to %s", self.url)
            return

        if self._transport is None:
            raise NotConnectedError()
        self._transport.send(message)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        """Close the socket permanently; no retry is scheduled afterwards."""
        self.closed = True
        self._state = ConnectionState.CLOSED

        if self._retry_policy is not None:
            self._retry_policy.cancel()
        if self._message_queue is not None:
            self._message_queue.purge()

        if self._transport is not None:
            _close_quietly(self._transport, code, reason)

    def abort(self, code: int | None, reason: str | None) -> None:
        """End the current disconnect episode and notify the close handler."""
        self.connecting = False
        self._state = ConnectionState.CLOSED

        if self._retry_policy is not None:
            self._retry_policy.cancel()
        if self._message_queue is not None:
            self._message_queue.purge()

        logger.info("Connection to %s closed (code=%s, reason=%s)", self.url, code, reason)
        self._handlers[EventKind.CLOSE](code, reason)

    # -- Transport events --

    def _is_current(self, transport: Transport, event: str) -> bool:
        if transport is self._transport:
            return True
        logger.debug("Ignoring %s event from a replaced transport", event)
        return False

    def _handle_open(self, transport: Transport, *_args: Any) -> None:
        if not self._is_current(transport, "open"):
            return
        if self.closed:
            logger.debug("Ignoring open after local close of %s", self.url)
            return

        self.connecting = False
        self._state = ConnectionState.OPEN

        retry_attempts_used = 0
        if self._retry_policy is not None:
            retry_attempts_used = self._retry_policy.attempts
            self._retry_policy.cancel()
            self._retry_policy.reset()

        if self._message_queue is not None:
            self._message_queue.flush(transport.send)

        self.open_count += 1
        info: OpenInfo = {
            "open_count": self.open_count,
            "close_count": self.close_count,
            "reconnect": self.open_count > 1,
            "retry_attempts_used": retry_attempts_used,
        }
        if info["reconnect"]:
            logger.info(
                "Reconnected to %s after %d attempts", self.url, retry_attempts_used
            )
        else:
            logger.info("Connected to %s", self.url)
        self._handlers[EventKind.OPEN](info)

    def _handle_close(
        self,
        transport: Transport,
        code: int | None = None,
        reason: str | None = None,
        *_args: Any,
    ) -> None:
        if not self._is_current(transport, "close"):
            return

        if self.closed:
            self.abort(CLOSE_NORMAL, CLOSED_LOCALLY_REASON)
            return

        policy = self._retry_policy
        if code == CLOSE_NORMAL or policy is None:
            self.abort(code, reason)
            return

        self.close_count += 1
        logger.warning(
            "Connection to %s lost (code=%s, reason=%s)", self.url, code, reason
        )
        self._handlers[EventKind.ERROR](
            ReconnectError(
                reason or "",
                code=code,
                close_count=self.close_count,
                open_count=self.open_count,
                retry_attempts_used=policy.attempts,
            )
        )

        # The error handler may have closed the socket itself
        if self.closed:
            return

        self.connecting = True
        self._state = ConnectionState.RETRYING
        policy.attempt(self.connect, partial(self.abort, code, reason))

    def _handle_message(self, transport: Transport, message: Any = None, *_args: Any) -> None:
        if self._is_current(transport, "message"):
            self._handlers[EventKind.MESSAGE](message)

    def _handle_error(self, transport: Transport, error: Any = None, *_args: Any) -> None:
        if self._is_current(transport, "error"):
            self._handlers[EventKind.ERROR](error)


def _close_quietly(transport: Transport, code: int | None, reason: str | None) -> None:
    try:
        transport.close(code, reason)
    except Exception as exc:
        # Already closed
        logger.debug("Ignoring transport close failure: %s", exc)


class RetrySocketBuilder:
    """Fluent builder for RetrySocket."""

    def __init__(self) -> None:
        self._transport_factory: TransportFactory | None = None
        self._url: str = ""
        self._protocols: str | list[str] | None = None
        self._connection_options: Any = None
        self._reconnect: ReconnectSetting = None
        self._queue_messages: QueueSetting = None
        self._handlers: dict[EventKind, Handler] = {}

    def transport(self, factory: TransportFactory) -> RetrySocketBuilder:
        """Set the factory called as ``factory(url, protocols, connection_options)``."""
        self._transport_factory = factory
        return self

    def url(self, url: str) -> RetrySocketBuilder:
        self._url = url
        return self

    def protocols(self, protocols: str | list[str]) -> RetrySocketBuilder:
        self._protocols = protocols
        return self

    def connection_options(self, options: Any) -> RetrySocketBuilder:
        self._connection_options = options
        return self

    def reconnect(self, setting: ReconnectSetting) -> RetrySocketBuilder:
        """Set the ``reconnect`` option (bool, type name or options dict)."""
        self._reconnect = setting
        return self

    def queue_messages(self, setting: QueueSetting) -> RetrySocketBuilder:
        """Set the ``queue_messages`` option (bool, type name or options dict)."""
        self._queue_messages = setting
        return self

    def on(self, event: str | EventKind, handler: Handler) -> RetrySocketBuilder:
        self._handlers[EventKind(event)] = handler
        return self

    def build(self) -> RetrySocket:
        """Build the socket. Raises ValueError if transport or url is missing."""
        if self._transport_factory is None:
            raise ValueError("A transport factory is required")
        if not self._url:
            raise ValueError("A url is required")

        socket = RetrySocket.create(
            self._transport_factory,
            self._url,
            protocols=self._protocols,
            connection_options=self._connection_options,
            reconnect=self._reconnect,
            queue_messages=self._queue_messages,
        )
        for kind, handler in self._handlers.items():
            socket.on(kind, handler)
        return socket


def open_socket(
    transport_factory: TransportFactory,
    url: str,
    *,
    protocols: str | list[str] | None = None,
    connection_options: Any = None,
    reconnect: ReconnectSetting = None,
    queue_messages: QueueSetting = None,
) -> RetrySocket:
    """Create a socket from options and connect it."""
    return RetrySocket.create(
        transport_factory,
        url,
        protocols=protocols,
        connection_options=connection_options,
        reconnect=reconnect,
        queue_messages=queue_messages,
    ).connect()
