"""Background worker pool built on APScheduler."""

import logging
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

__all__ = ["TaskRunner"]

logger = logging.getLogger(__name__)


class TaskRunner:
    """Runs recurring ticks and one-off jobs off the UI thread.

    Jobs run on the scheduler's thread pool. Each one-off job gets its own
    id, so a slow job never holds up a later one or the next tick.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.debug("Task runner started")

    def shutdown(self) -> None:
        """Stop the pool without waiting for in-flight jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.debug("Task runner stopped")

    def every(self, seconds: float, func: Callable[[], object], job_id: str) -> None:
        """Run ``func`` every ``seconds`` (first run one interval from now)."""
        self.scheduler.add_job(
            _run_logged,
            trigger=IntervalTrigger(seconds=seconds),
            args=[func, job_id],
            id=job_id,
            replace_existing=True,
            # Late ticks are folded into one rather than replayed
            coalesce=True,
            max_instances=1,
        )
        logger.info(f"Scheduled {job_id} every {seconds}s")

    def submit(self, func: Callable, *args, name: Optional[str] = None) -> None:
        """Run ``func(*args)`` once, as soon as a worker is free."""
        label = name or getattr(func, "__name__", "task")
        self.scheduler.add_job(
            _run_logged,
            args=[func, label, *args],
            name=label,
            # Run however late a free worker turns up
            misfire_grace_time=None,
        )


def _run_logged(func: Callable, label: str, *args) -> None:
    """Job boundary: exceptions are logged, never propagated."""
    try:
        func(*args)
    except Exception:
        logger.exception(f"Background task {label} failed")
