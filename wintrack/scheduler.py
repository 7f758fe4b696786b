"""Recurring uptime reminders."""

import logging
import time
from datetime import datetime
from typing import Callable

from .config_store import ConfigStore
from .messages import elapsed_message
from .tasks import TaskRunner

__all__ = ["PeriodicScheduler", "TICK_SECONDS"]

logger = logging.getLogger(__name__)

# How often the due condition is evaluated, not how often messages go out
TICK_SECONDS = 60


class PeriodicScheduler:
    """Decides when the scheduled message is due.

    Uses ``time.monotonic()`` so the interval is unaffected by system clock
    changes. ``check()`` is called once per tick; when the first schedule
    entry's interval has elapsed since the last send (or since start-up) the
    elapsed-time message is handed to ``on_due``.

    Only ``scheduled_messages[0]`` is honoured. Further entries are kept in
    the configuration but have no effect.
    """

    def __init__(self, store: ConfigStore, on_due: Callable[[str], object]) -> None:
        self._store = store
        self._on_due = on_due
        self._last_sent_at: float = time.monotonic()

    @property
    def last_sent_at(self) -> float:
        return self._last_sent_at

    def start(self, runner: TaskRunner, tick_seconds: float = TICK_SECONDS) -> None:
        """Register the tick on the worker pool."""
        runner.every(tick_seconds, self.check, job_id="scheduled_message_tick")

    def check(self) -> bool:
        """Evaluate the due condition. Returns True if a message was triggered."""
        now = time.monotonic()
        config = self._store.read()
        if not config.scheduled_messages:
            return False

        schedule = config.scheduled_messages[0]
        if not schedule.enabled or schedule.interval_minutes <= 0:
            return False

        elapsed_minutes = int((now - self._last_sent_at) // 60)
        if elapsed_minutes < schedule.interval_minutes:
            return False

        hours, minutes = divmod(elapsed_minutes, 60)
        # Reset even if delivery fails: the next window starts now
        self._last_sent_at = now
        logger.info(f"Scheduled message triggered ({hours}h {minutes}m elapsed)")
        self._on_due(elapsed_message(datetime.now(), hours, minutes))
        return True
