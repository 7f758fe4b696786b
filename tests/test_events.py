"""Tests for the UI event bridge."""

import threading

from wintrack.events import EventBridge, UIEvent, UIEventKind


class TestUIEvent:
    """Tests for UIEvent constructors."""

    def test_constructors(self):
        assert UIEvent.open_config().kind == UIEventKind.OPEN_CONFIG_REQUESTED
        assert UIEvent.exit().kind == UIEventKind.EXIT_REQUESTED
        assert UIEvent.config_saved().kind == UIEventKind.CONFIG_SAVED
        assert UIEvent.config_window_closed().kind == UIEventKind.CONFIG_WINDOW_CLOSED

    def test_native_close_carries_window_id(self):
        event = UIEvent.native_close(7)

        assert event.kind == UIEventKind.NATIVE_WINDOW_CLOSE_REQUESTED
        assert event.window_id == 7


class TestEventBridge:
    """Tests for EventBridge."""

    def setup_method(self):
        self.bridge = EventBridge()

    def test_drain_is_fifo(self):
        events = [UIEvent.open_config(), UIEvent.config_saved(), UIEvent.exit()]
        for event in events:
            assert self.bridge.post(event) is True

        assert self.bridge.drain() == events
        assert self.bridge.drain() == []

    def test_get_times_out_when_empty(self):
        assert self.bridge.get(timeout=0.01) is None

    def test_get_returns_next_event(self):
        self.bridge.post(UIEvent.exit())
        assert self.bridge.get(timeout=1) == UIEvent.exit()

    def test_post_after_close_is_noop(self):
        self.bridge.close()

        assert self.bridge.closed is True
        assert self.bridge.post(UIEvent.open_config()) is False
        assert self.bridge.drain() == []

    def test_many_producers_preserve_per_producer_order(self):
        per_thread = 200

        def producer(window_id_base):
            for i in range(per_thread):
                self.bridge.post(UIEvent.native_close(window_id_base + i))

        threads = [threading.Thread(target=producer, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        events = self.bridge.drain()
        assert len(events) == 4 * per_thread
        for n in range(4):
            ids = [e.window_id for e in events if e.window_id // 1000 == n]
            assert ids == sorted(ids)
