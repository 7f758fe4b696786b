"""Cross-thread event mailbox feeding the UI thread."""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = ["EventBridge", "UIEvent", "UIEventKind"]

logger = logging.getLogger(__name__)


class UIEventKind(Enum):
    """Events handled by the UI controller."""

    OPEN_CONFIG_REQUESTED = "open_config_requested"
    EXIT_REQUESTED = "exit_requested"
    CONFIG_SAVED = "config_saved"
    CONFIG_WINDOW_CLOSED = "config_window_closed"
    NATIVE_WINDOW_CLOSE_REQUESTED = "native_window_close_requested"


@dataclass(frozen=True)
class UIEvent:
    """A single event; ``window_id`` is only set for native close requests."""

    kind: UIEventKind
    window_id: Optional[int] = None

    @classmethod
    def open_config(cls) -> "UIEvent":
        return cls(UIEventKind.OPEN_CONFIG_REQUESTED)

    @classmethod
    def exit(cls) -> "UIEvent":
        return cls(UIEventKind.EXIT_REQUESTED)

    @classmethod
    def config_saved(cls) -> "UIEvent":
        return cls(UIEventKind.CONFIG_SAVED)

    @classmethod
    def config_window_closed(cls) -> "UIEvent":
        return cls(UIEventKind.CONFIG_WINDOW_CLOSED)

    @classmethod
    def native_close(cls, window_id: int) -> "UIEvent":
        return cls(UIEventKind.NATIVE_WINDOW_CLOSE_REQUESTED, window_id)


class EventBridge:
    """Multi-producer, single-consumer FIFO of UI events.

    Any thread may ``post()``; only the UI thread reads. Posting never
    blocks. Once the consumer has shut down the bridge is closed and further
    posts are dropped.
    """

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[UIEvent]" = queue.SimpleQueue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def post(self, event: UIEvent) -> bool:
        """Enqueue an event. Returns False if the bridge is closed."""
        if self._closed.is_set():
            logger.debug(f"Dropped {event.kind.value}: event loop has exited")
            return False
        self._queue.put(event)
        return True

    def get(self, timeout: Optional[float] = None) -> Optional[UIEvent]:
        """Wait for the next event; None on timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[UIEvent]:
        """Return every event queued so far, oldest first, without blocking."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        self._closed.set()
