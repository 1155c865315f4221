"""Tests for the transport adapters."""

import pytest

from conftest import AttributeSocket, EmitterSocket
from retrysocket import Transport, standardize
from retrysocket.transport import AttributeTransport, EmitterTransport


class TestStandardize:
    """Tests for standardize()."""

    def test_transport_passes_through(self):
        class Native(Transport):
            def on_open(self, callback): ...
            def on_close(self, callback): ...
            def on_message(self, callback): ...
            def on_error(self, callback): ...
            def send(self, message): ...
            def close(self, code=None, reason=None): ...

        native = Native()
        assert standardize(native) is native

    def test_emitter_socket(self):
        assert isinstance(standardize(EmitterSocket()), EmitterTransport)

    def test_attribute_socket(self):
        assert isinstance(standardize(AttributeSocket()), AttributeTransport)

    def test_unsupported_socket(self):
        with pytest.raises(TypeError, match="Unsupported socket implementation: object"):
            standardize(object())


class TestEmitterTransport:
    """Tests for EmitterTransport."""

    def test_subscribes_once_per_event_kind(self):
        raw = EmitterSocket()
        standardize(raw)
        assert all(len(handlers) == 1 for handlers in raw.handlers.values())

    def test_forwards_events(self):
        raw = EmitterSocket()
        transport = standardize(raw)
        seen = []
        transport.on_open(lambda: seen.append("open"))
        transport.on_message(lambda msg: seen.append(("message", msg)))
        transport.on_error(lambda err: seen.append(("error", err)))
        transport.on_close(lambda code, reason: seen.append(("close", code, reason)))

        raw.fire("open")
        raw.fire("message", "hi")
        raw.fire("error", "boom")
        raw.fire("close", 1006, "gone")

        assert seen == ["open", ("message", "hi"), ("error", "boom"), ("close", 1006, "gone")]

    def test_later_callback_replaces_earlier(self):
        raw = EmitterSocket()
        transport = standardize(raw)
        seen = []
        transport.on_message(lambda msg: seen.append("first"))
        transport.on_message(lambda msg: seen.append("second"))

        raw.fire("message", "x")

        assert seen == ["second"]

    def test_send_and_close(self):
        raw = EmitterSocket()
        transport = standardize(raw)

        transport.send("payload")
        transport.close(1000, "bye")

        assert raw.sent == ["payload"]
        assert raw.close_args == (1000, "bye")

    def test_close_without_arguments(self):
        raw = EmitterSocket()
        standardize(raw).close()
        assert raw.closed is True
        assert raw.close_args == ()


class TestAttributeTransport:
    """Tests for AttributeTransport."""

    def test_assigns_callback_slots(self):
        raw = AttributeSocket()
        transport = standardize(raw)
        on_open, on_message = object(), object()

        transport.on_open(on_open)
        transport.on_message(on_message)

        assert raw.onopen is on_open
        assert raw.onmessage is on_message

    def test_send_and_close(self):
        raw = AttributeSocket()
        transport = standardize(raw)

        transport.send("payload")
        transport.close(1000, "bye")

        assert raw.sent == ["payload"]
        assert raw.closed is True
