"""Outbound message buffering while a socket is (re)connecting."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable


class MessageQueue(ABC):
    """Buffer for messages sent while no live transport exists.

    Implementations must deliver messages in the order they were pushed.
    """

    @abstractmethod
    def push(self, message: Any) -> None:
        """Append a message to the tail of the buffer."""

    @abstractmethod
    def purge(self) -> None:
        """Discard every buffered message."""

    @abstractmethod
    def flush(self, send_fn: Callable[[Any], None]) -> None:
        """Pass buffered messages to ``send_fn`` in FIFO order until empty."""


class SimpleQueue(MessageQueue):
    """Unbounded in-memory FIFO queue."""

    def __init__(self) -> None:
        self._messages: deque[Any] = deque()

    def __len__(self) -> int:
        return len(self._messages)

    def push(self, message: Any) -> None:
        self._messages.append(message)

    def purge(self) -> None:
        self._messages.clear()

    def flush(self, send_fn: Callable[[Any], None]) -> None:
        # Emptiness is re-checked each pass so messages pushed by send_fn drain too
        while self._messages:
            send_fn(self._messages.popleft())
