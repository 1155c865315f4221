"""Canonical transport surface and adapters for third-party socket objects."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from retrysocket.types import EventKind, Handler

logger = logging.getLogger("retrysocket.transport")

_ATTRIBUTE_SLOTS = {
    EventKind.OPEN: "onopen",
    EventKind.MESSAGE: "onmessage",
    EventKind.ERROR: "onerror",
    EventKind.CLOSE: "onclose",
}


class Transport(ABC):
    """A bidirectional message-oriented connection.

    Each ``on_*`` call replaces the callback previously registered for that
    event kind.
    """

    @abstractmethod
    def on_open(self, callback: Handler) -> None: ...

    @abstractmethod
    def on_close(self, callback: Handler) -> None: ...

    @abstractmethod
    def on_message(self, callback: Handler) -> None: ...

    @abstractmethod
    def on_error(self, callback: Handler) -> None: ...

    @abstractmethod
    def send(self, message: Any) -> None: ...

    @abstractmethod
    def close(self, code: int | None = None, reason: str | None = None) -> None: ...


class CallbackTransport(Transport):
    """Transport keeping one callback slot per event kind."""

    def __init__(self) -> None:
        self._callbacks: dict[EventKind, Handler] = {}

    def on_open(self, callback: Handler) -> None:
        self._callbacks[EventKind.OPEN] = callback

    def on_close(self, callback: Handler) -> None:
        self._callbacks[EventKind.CLOSE] = callback

    def on_message(self, callback: Handler) -> None:
        self._callbacks[EventKind.MESSAGE] = callback

    def on_error(self, callback: Handler) -> None:
        self._callbacks[EventKind.ERROR] = callback

    def _emit(self, kind: EventKind, *args: Any) -> None:
        callback = self._callbacks.get(kind)
        if callback is not None:
            callback(*args)


class EmitterTransport(CallbackTransport):
    """Adapts sockets exposing ``on(event, handler)`` registration."""

    def __init__(self, raw: Any) -> None:
        super().__init__()
        self.raw = raw
        for kind in EventKind:
            raw.on(kind.value, self._dispatcher(kind))

    def _dispatcher(self, kind: EventKind) -> Handler:
        def dispatch(*args: Any) -> None:
            self._emit(kind, *args)

        return dispatch

    def send(self, message: Any) -> None:
        self.raw.send(message)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        _close_raw(self.raw, code, reason)


class AttributeTransport(Transport):
    """Adapts sockets exposing ``onopen``/``onmessage``/``onerror``/``onclose`` slots."""

    def __init__(self, raw: Any) -> None:
        self.raw = raw

    def on_open(self, callback: Handler) -> None:
        setattr(self.raw, _ATTRIBUTE_SLOTS[EventKind.OPEN], callback)

    def on_close(self, callback: Handler) -> None:
        setattr(self.raw, _ATTRIBUTE_SLOTS[EventKind.CLOSE], callback)

    def on_message(self, callback: Handler) -> None:
        setattr(self.raw, _ATTRIBUTE_SLOTS[EventKind.MESSAGE], callback)

    def on_error(self, callback: Handler) -> None:
        setattr(self.raw, _ATTRIBUTE_SLOTS[EventKind.ERROR], callback)

    def send(self, message: Any) -> None:
        self.raw.send(message)

    def close(self, code: int | None = None, reason: str | None = None) -> None:
        _close_raw(self.raw, code, reason)


def _close_raw(raw: Any, code: int | None, reason: str | None) -> None:
    if code is None and reason is None:
        raw.close()
    else:
        raw.close(code, reason)


def standardize(raw: Any) -> Transport:
    """Normalize a socket object onto the :class:`Transport` surface.

    Raises TypeError if ``raw`` matches none of the supported shapes.
    """
    if isinstance(raw, Transport):
        return raw
    if callable(getattr(raw, "on", None)):
        logger.debug("Adapting %s as an event emitter socket", type(raw).__name__)
        return EmitterTransport(raw)
    if all(hasattr(raw, slot) for slot in _ATTRIBUTE_SLOTS.values()):
        logger.debug("Adapting %s as an attribute callback socket", type(raw).__name__)
        return AttributeTransport(raw)
    raise TypeError(f"Unsupported socket implementation: {type(raw).__name__}")
