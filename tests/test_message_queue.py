"""Tests for outbound message queues."""

from retrysocket import MessageQueue, SimpleQueue


class TestSimpleQueue:
    """Tests for SimpleQueue."""

    def test_is_a_message_queue(self):
        assert isinstance(SimpleQueue(), MessageQueue)

    def test_push_appends(self):
        queue = SimpleQueue()
        queue.push("a")
        queue.push("b")
        assert len(queue) == 2

    def test_flush_in_fifo_order(self):
        """Test flush hands messages over in the order they were pushed."""
        queue = SimpleQueue()
        for message in ("one", "two", "three"):
            queue.push(message)

        sent = []
        queue.flush(sent.append)

        assert sent == ["one", "two", "three"]
        assert len(queue) == 0

    def test_flush_drains_messages_pushed_during_flush(self):
        """Test messages pushed by the send function are also flushed."""
        queue = SimpleQueue()
        queue.push("first")
        sent = []

        def send(message):
            sent.append(message)
            if message == "first":
                queue.push("late")

        queue.flush(send)

        assert sent == ["first", "late"]

    def test_purge_discards_everything(self):
        queue = SimpleQueue()
        queue.push("a")
        queue.push("b")
        queue.purge()

        sent = []
        queue.flush(sent.append)
        assert sent == []

    def test_empty_queue_operations_are_noops(self):
        """Test purge and flush on an empty queue never call send."""
        queue = SimpleQueue()
        calls = []

        queue.purge()
        queue.flush(calls.append)

        assert calls == []
        assert len(queue) == 0
