"""WinTrack - Main entry point."""

import logging
import os
import signal
import sys
import tkinter as tk
from typing import Optional

from . import __version__
from .config import Config, setup_logging
from .config_store import ConfigStore, PersistError
from .events import EventBridge, UIEvent
from .notifier import Notifier
from .power_events import start_shutdown_listener
from .scheduler import PeriodicScheduler
from .tasks import TaskRunner
from .ui.config_window import ConfigWindow
from .ui.controller import UIController
from .ui.tray import TrayIcon
from .webhook import WebhookClient

logger = logging.getLogger(__name__)

# How often the Tk loop drains the event bridge
POLL_INTERVAL_MS = 50


class WinTrackApp:
    """Main application orchestrator.

    Wires components together, handles lifecycle (start / shutdown), and
    routes tray, signal and OS events into the UI thread via the event bridge.
    """

    def __init__(self, store: Optional[ConfigStore] = None):
        """Initialize the application."""
        setup_logging(os.getenv("WINTRACK_DEBUG") == "1")
        logger.info(f"WinTrack {__version__} starting...")

        self.store = store or ConfigStore.load()
        self.client = WebhookClient()
        self.notifier = Notifier(self.store, self.client)
        self.runner = TaskRunner()
        self.bridge = EventBridge()
        self.schedule = PeriodicScheduler(self.store, on_due=self._send_scheduled)

        self.tray = TrayIcon(
            on_open_config=lambda: self.bridge.post(UIEvent.open_config()),
            on_quit=lambda: self.bridge.post(UIEvent.exit()),
        )

        self._root: Optional[tk.Tk] = None
        self.controller: Optional[UIController] = None
        self._shutdown_done = False

    def run(self) -> None:
        """Run the application until Exit is requested."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.start_services()
        start_shutdown_listener(lambda: self.bridge.post(UIEvent.exit()))

        # Hidden root: all configuration windows are Toplevels of it and
        # every Tk call happens on this thread.
        self._root = tk.Tk()
        self._root.withdraw()
        self.controller = UIController(
            bridge=self.bridge,
            store=self.store,
            notifier=self.notifier,
            window_factory=lambda config, window_id, on_navigate, on_close: ConfigWindow(
                self._root, config, window_id, on_navigate, on_close
            ),
            persist=self._persist_in_background,
            on_exit=self._root.quit,
        )

        self.tray.start()
        logger.info("WinTrack running")
        try:
            self._root.after(POLL_INTERVAL_MS, self._poll_events)
            self._root.mainloop()
        finally:
            self._shutdown()

    def start_services(self) -> None:
        """Start the worker pool, send the boot message and arm the schedule."""
        self.runner.start()
        self.runner.submit(self.notifier.notify_boot, name="boot_message")
        self.schedule.start(self.runner)

    # -- Event handlers ---------------------------------------------------

    def _poll_events(self) -> None:
        self.controller.pump()
        if self.controller.running:
            self._root.after(POLL_INTERVAL_MS, self._poll_events)

    def _send_scheduled(self, markdown: str) -> None:
        self.runner.submit(self.notifier.deliver, markdown, "scheduled", name="scheduled_message")

    def _persist_in_background(self, config: Config) -> None:
        self.runner.submit(self._persist, config, name="save_config")

    def _persist(self, config: Config) -> None:
        try:
            self.store.replace(config)
        except PersistError as e:
            logger.error(str(e))

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}")
        self.bridge.post(UIEvent.exit())

    # -- Lifecycle --------------------------------------------------------

    def _shutdown(self) -> None:
        """Shutdown the application. Safe to call multiple times."""
        if self._shutdown_done:
            return
        self._shutdown_done = True
        logger.info("Shutting down...")

        self.bridge.close()
        self.tray.stop()
        self.runner.shutdown()
        self.client.close()
        if self._root is not None:
            self._root.destroy()
            self._root = None

        logger.info("Shutdown complete")

    def __enter__(self) -> "WinTrackApp":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._shutdown()


class SingleInstanceLock:
    """Advisory lock on ``.wintrack.lock`` so only one WinTrack sends boot messages."""

    def __init__(self, path: Optional[str] = None):
        self._path = path or os.path.join(Config.get_config_dir(), ".wintrack.lock")
        self._handle = None

    def _lock(self, unlock: bool = False) -> None:
        if sys.platform == "win32":
            import msvcrt
            mode = msvcrt.LK_UNLCK if unlock else msvcrt.LK_NBLCK
            msvcrt.locking(self._handle.fileno(), mode, 1)
        else:
            import fcntl
            fcntl.flock(self._handle, fcntl.LOCK_UN if unlock else fcntl.LOCK_EX | fcntl.LOCK_NB)

    def acquire(self) -> bool:
        os.makedirs(os.path.dirname(self._path), exist_ok=True)
        self._handle = open(self._path, "a+")  # noqa: SIM115
        try:
            self._lock()
        except OSError:
            logger.info(f"Lock {self._path} is held by another instance")
            self._handle.close()
            self._handle = None
            return False
        return True

    def release(self) -> None:
        if self._handle is None:
            return
        try:
            self._lock(unlock=True)
        except OSError as e:
            logger.debug(f"Could not unlock {self._path}: {e}")
        self._handle.close()
        self._handle = None


def main() -> None:
    """Main entry point."""
    instance_lock = SingleInstanceLock()
    if not instance_lock.acquire():
        print("WinTrack is already running.")
        sys.exit(0)

    try:
        with WinTrackApp() as app:
            app.run()
    finally:
        instance_lock.release()


if __name__ == "__main__":
    main()
