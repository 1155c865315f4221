"""Resolution of user-facing ``reconnect`` / ``queue_messages`` options."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from retrysocket.errors import ConfigurationError
from retrysocket.message_queue import MessageQueue, SimpleQueue
from retrysocket.retry import IntervalRetryPolicy, RetryPolicy
from retrysocket.types import QueueSetting, ReconnectSetting

DEFAULT_RETRY_POLICY = "interval"
DEFAULT_MESSAGE_QUEUE = "simple"

RetryPolicyFactory = Callable[..., RetryPolicy]
MessageQueueFactory = Callable[..., MessageQueue]

_retry_policies: dict[str, RetryPolicyFactory] = {}
_message_queues: dict[str, MessageQueueFactory] = {}


def register_retry_policy(name: str, factory: RetryPolicyFactory) -> None:
    """Make a retry policy selectable by ``type`` name.

    The factory receives the remaining option keys as keyword arguments.
    """
    _retry_policies[name] = factory


def register_message_queue(name: str, factory: MessageQueueFactory) -> None:
    """Make a message queue selectable by ``type`` name."""
    _message_queues[name] = factory


def _interval_policy(
    max_attempts: int | None = None, interval: float | None = None, **extra: Any
) -> IntervalRetryPolicy:
    if extra:
        raise ConfigurationError(
            f"Unknown interval reconnect options: {', '.join(sorted(extra))}"
        )
    return IntervalRetryPolicy(
        max_attempts=max_attempts or 0,
        interval_ms=interval or 500,
    )


def _simple_queue(**extra: Any) -> SimpleQueue:
    if extra:
        raise ConfigurationError(
            f"Unknown simple queue options: {', '.join(sorted(extra))}"
        )
    return SimpleQueue()


register_retry_policy("interval", _interval_policy)
register_message_queue("simple", _simple_queue)


def _normalize(setting: Any, default_type: str, option: str) -> dict[str, Any] | None:
    if setting is None or setting is False:
        return None
    if setting is True:
        return {"type": default_type}
    if isinstance(setting, str):
        return {"type": setting}
    if isinstance(setting, Mapping):
        options = dict(setting)
        options["type"] = options.get("type") or default_type
        return options
    raise ConfigurationError(
        f"Invalid {option} option: expected bool, str or mapping, got {type(setting).__name__}"
    )


def resolve_retry_policy(setting: ReconnectSetting) -> RetryPolicy | None:
    """Build the retry policy selected by a ``reconnect`` option, or None if disabled.

    Raises ConfigurationError for unknown types.
    """
    options = _normalize(setting, DEFAULT_RETRY_POLICY, "reconnect")
    if options is None:
        return None
    kind = options.pop("type")
    factory = _retry_policies.get(kind)
    if factory is None:
        raise ConfigurationError(f"Invalid reconnect type: {kind}")
    return factory(**options)


def resolve_message_queue(setting: QueueSetting) -> MessageQueue | None:
    """Build the message queue selected by a ``queue_messages`` option, or None if disabled.

    Raises ConfigurationError for unknown types.
    """
    options = _normalize(setting, DEFAULT_MESSAGE_QUEUE, "queue_messages")
    if options is None:
        return None
    kind = options.pop("type")
    factory = _message_queues.get(kind)
    if factory is None:
        raise ConfigurationError(f"Invalid message queue type: {kind}")
    return factory(**options)
