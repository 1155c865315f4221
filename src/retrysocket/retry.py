"""Reconnection retry policies."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

from retrysocket.errors import ConfigurationError

logger = logging.getLogger("retrysocket.retry")


class RetryPolicy(ABC):
    """Decides whether and when to re-attempt a connection.

    ``attempts`` counts retries scheduled since the last :meth:`reset`.
    """

    attempts: int = 0

    @abstractmethod
    def attempt(self, proceed: Callable[[], object], give_up: Callable[[], object]) -> None:
        """Schedule ``proceed`` or call ``give_up`` when retries are exhausted."""

    @abstractmethod
    def reset(self) -> None:
        """Reset the attempt counter (call on successful connection)."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel any outstanding scheduled attempt."""


class IntervalRetryPolicy(RetryPolicy):
    """Fixed-interval retries, optionally capped at ``max_attempts`` (0 = unlimited)."""

    def __init__(
        self,
        max_attempts: int = 0,
        interval_ms: float = 500,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if max_attempts < 0:
            raise ConfigurationError("max_attempts must be >= 0")
        if interval_ms <= 0:
            raise ConfigurationError("interval must be > 0")
        self.max_attempts = max_attempts
        self.interval_ms = interval_ms
        self.attempts = 0
        self._loop = loop
        self._timer: asyncio.TimerHandle | None = None

    def attempt(self, proceed: Callable[[], object], give_up: Callable[[], object]) -> None:
        if self.max_attempts and self.attempts >= self.max_attempts:
            logger.debug("Giving up after %d attempts", self.attempts)
            give_up()
            return

        self.attempts += 1
        loop = self._loop or asyncio.get_running_loop()
        logger.debug(
            "Retry %d scheduled in %.0fms", self.attempts, self.interval_ms
        )
        self._timer = loop.call_later(self.interval_ms / 1000.0, self._fire, proceed)

    def _fire(self, proceed: Callable[[], object]) -> None:
        self._timer = None
        proceed()

    def reset(self) -> None:
        self.attempts = 0

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def pending(self) -> bool:
        """Whether an attempt is currently scheduled."""
        return self._timer is not None
