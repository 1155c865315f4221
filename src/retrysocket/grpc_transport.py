"""Transport over a grpc.aio bidirectional streaming call."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

import grpc
import grpc.aio

from retrysocket.errors import ConfigurationError, TransportClosedError
from retrysocket.transport import CallbackTransport
from retrysocket.types import (
    CLOSE_ABNORMAL,
    CLOSE_GOING_AWAY,
    CLOSE_INTERNAL_ERROR,
    CLOSE_NORMAL,
    EventKind,
)

logger = logging.getLogger("retrysocket.grpc")

DEFAULT_CHANNEL_OPTIONS = [
    ("grpc.keepalive_time_ms", 10_000),
    ("grpc.keepalive_timeout_ms", 5_000),
]

_ABNORMAL_STATUSES = (grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.DEADLINE_EXCEEDED)

_END_OF_STREAM = object()


def close_code_for_status(status: grpc.StatusCode | None) -> int:
    """Map a gRPC status onto a websocket close code."""
    if status is None or status == grpc.StatusCode.OK:
        return CLOSE_NORMAL
    if status == grpc.StatusCode.CANCELLED:
        return CLOSE_GOING_AWAY
    if status in _ABNORMAL_STATUSES:
        return CLOSE_ABNORMAL
    return CLOSE_INTERNAL_ERROR


class GrpcStreamTransport(CallbackTransport):
    """Runs one stream-stream call and reports it as transport events.

    ``url`` is the channel target. ``connection_options`` must name the
    ``method`` to call and may carry ``request_serializer``,
    ``response_deserializer``, ``metadata``, ``credentials``,
    ``channel_options`` or a pre-built ``channel``. gRPC has no subprotocol
    negotiation, so ``protocols`` is accepted and ignored.

    Must be constructed inside a running event loop; the call starts on the
    next loop iteration so callbacks registered right after construction see
    every event.
    """

    def __init__(
        self,
        url: str,
        protocols: Any = None,
        connection_options: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        options = dict(connection_options or {})
        method = options.get("method")
        if not method:
            raise ConfigurationError("gRPC transport requires a 'method' connection option")

        self.url = url
        self.method = method
        self._metadata = options.get("metadata")
        self._owns_channel = options.get("channel") is None
        self._channel = options.get("channel") or _open_channel(url, options)
        self._multicallable = self._channel.stream_stream(
            method,
            request_serializer=options.get("request_serializer"),
            response_deserializer=options.get("response_deserializer"),
        )

        self._outbox: asyncio.Queue[Any] = asyncio.Queue()
        self._call: Any = None
        self._closed = False
        self._close_code: int | None = None
        self._close_reason: str | None = None
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Any) -> None:
        if self._closed:
            raise TransportClosedError()
        self._outbox.put_nowait(message)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        if self._closed or self._close_code is not None:
            raise TransportClosedError()
        self._close_code = CLOSE_NORMAL if code is None else code
        self._close_reason = reason or ""
        self._outbox.put_nowait(_END_OF_STREAM)
        # Before the call starts, _run sees the close code and skips it
        if self._call is not None:
            self._call.cancel()

    async def _requests(self) -> AsyncIterator[Any]:
        while True:
            message = await self._outbox.get()
            if message is _END_OF_STREAM:
                return
            yield message

    async def _stream(self) -> tuple[int, str]:
        self._call = self._multicallable(self._requests(), metadata=self._metadata)
        await self._call.wait_for_connection()
        logger.debug("Stream %s opened on %s", self.method, self.url)
        self._emit(EventKind.OPEN)

        async for response in self._call:
            self._emit(EventKind.MESSAGE, response)

        status = await self._call.code()
        return close_code_for_status(status), await self._call.details() or ""

    async def _outcome(self) -> tuple[int, str]:
        code, reason = CLOSE_NORMAL, ""
        try:
            if self._close_code is None:
                code, reason = await self._stream()
        except grpc.aio.AioRpcError as exc:
            if self._close_code is None:
                logger.debug("Stream %s failed: %s", self.method, exc.code())
                self._emit(EventKind.ERROR, exc)
                code, reason = close_code_for_status(exc.code()), exc.details() or ""
        except asyncio.CancelledError:
            if self._close_code is None:
                raise
        except Exception as exc:
            # Raised by a callback running inside this task
            if self._close_code is None:
                logger.warning("Stream %s handler failed: %r", self.method, exc)
                if self._call is not None:
                    self._call.cancel()
                self._emit(EventKind.ERROR, exc)
                code, reason = CLOSE_INTERNAL_ERROR, str(exc)

        if self._close_code is not None:
            code, reason = self._close_code, self._close_reason or ""
        return code, reason

    def _mark_closed(self) -> None:
        if not self._closed:
            self._closed = True
            self._outbox.put_nowait(_END_OF_STREAM)

    async def _run(self) -> None:
        try:
            code, reason = await self._outcome()
            self._mark_closed()
            # Close is reported before the channel teardown yields to the loop
            self._emit(EventKind.CLOSE, code, reason)
        finally:
            self._mark_closed()
            if self._owns_channel:
                await self._channel.close()


def _open_channel(url: str, options: dict[str, Any]) -> grpc.aio.Channel:
    channel_options = options.get("channel_options", DEFAULT_CHANNEL_OPTIONS)
    credentials = options.get("credentials")
    if credentials is not None:
        return grpc.aio.secure_channel(url, credentials, options=channel_options)
    return grpc.aio.insecure_channel(url, options=channel_options)
