"""Shared fakes for retrysocket tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[..., Any], args: tuple) -> None:
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Records call_later timers so tests can fire them by hand."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        timer = FakeTimer(delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire(self, timer: FakeTimer | None = None) -> None:
        timer = timer or self.pending[0]
        timer.cancelled = True
        timer.callback(*timer.args)


class EmitterSocket:
    """Socket with ``on(event, handler)`` registration and fan-out."""

    def __init__(self, url: str = "", protocols: Any = None, options: Any = None) -> None:
        self.url = url
        self.protocols = protocols
        self.options = options
        self.handlers: dict[str, list[Callable[..., Any]]] = {
            "open": [],
            "message": [],
            "error": [],
            "close": [],
        }
        self.sent: list[Any] = []
        self.closed = False
        self.close_args: tuple = ()

    def on(self, event: str, handler: Callable[..., Any]) -> None:
        self.handlers[event].append(handler)

    def fire(self, event: str, *args: Any) -> None:
        for handler in list(self.handlers[event]):
            handler(*args)

    def send(self, message: Any) -> None:
        if self.closed:
            raise RuntimeError("socket already closed")
        self.sent.append(message)

    def close(self, *args: Any) -> None:
        if self.closed:
            raise RuntimeError("socket already closed")
        self.closed = True
        self.close_args = args


class AttributeSocket:
    """Socket exposing ``onopen``-style callback slots."""

    def __init__(self, url: str = "", protocols: Any = None, options: Any = None) -> None:
        self.onopen = None
        self.onmessage = None
        self.onerror = None
        self.onclose = None
        self.sent: list[Any] = []
        self.closed = False

    def send(self, message: Any) -> None:
        self.sent.append(message)

    def close(self, *args: Any) -> None:
        self.closed = True


class SocketFactory:
    """Transport factory remembering every socket it built."""

    def __init__(self, socket_cls: type = EmitterSocket) -> None:
        self.socket_cls = socket_cls
        self.instances: list[Any] = []

    def __call__(self, url: str, protocols: Any, options: Any) -> Any:
        socket = self.socket_cls(url, protocols, options)
        self.instances.append(socket)
        return socket

    @property
    def last(self) -> Any:
        return self.instances[-1]


@pytest.fixture
def factory() -> SocketFactory:
    return SocketFactory()


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()
