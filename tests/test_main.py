"""Tests for application wiring that runs without a display."""

import os
import sys
import tempfile
from unittest.mock import Mock, patch

import pytest

from wintrack.config import Config
from wintrack.config_store import ConfigStore, PersistError
from wintrack.events import UIEvent, UIEventKind


@pytest.fixture
def app(tmp_path):
    """WinTrackApp with tray and logging stubbed out."""
    with patch("wintrack.main.setup_logging"), patch("wintrack.main.TrayIcon") as tray_cls:
        from wintrack.main import WinTrackApp

        store = ConfigStore(path=tmp_path / "config.json")
        application = WinTrackApp(store=store)
        application.runner = Mock()
        application.tray_cls = tray_cls
        yield application


class TestWinTrackApp:
    """Tests for WinTrackApp."""

    def test_tray_actions_post_events(self, app):
        kwargs = app.tray_cls.call_args.kwargs

        kwargs["on_open_config"]()
        kwargs["on_quit"]()

        kinds = [e.kind for e in app.bridge.drain()]
        assert kinds == [UIEventKind.OPEN_CONFIG_REQUESTED, UIEventKind.EXIT_REQUESTED]

    def test_start_services_submits_boot_and_arms_tick(self, app):
        app.start_services()

        app.runner.start.assert_called_once()
        app.runner.submit.assert_called_once_with(app.notifier.notify_boot, name="boot_message")
        app.runner.every.assert_called_once()

    def test_scheduled_send_runs_in_background(self, app):
        app._send_scheduled("elapsed")

        app.runner.submit.assert_called_once_with(
            app.notifier.deliver, "elapsed", "scheduled", name="scheduled_message"
        )

    def test_persist_error_is_logged(self, app, caplog):
        with patch.object(
            ConfigStore, "replace", side_effect=PersistError(app.store.path, OSError("ro"))
        ):
            app._persist(Config())

        assert "Failed to save config" in caplog.text

    def test_signal_posts_exit(self, app):
        app._signal_handler(15, None)

        assert app.bridge.drain() == [UIEvent.exit()]

    def test_shutdown_is_idempotent(self, app):
        app._shutdown()
        app._shutdown()

        app.runner.shutdown.assert_called_once()
        assert app.bridge.closed is True


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX advisory locks")
class TestSingleInstanceLock:
    """Tests for SingleInstanceLock."""

    def setup_method(self):
        self.path = os.path.join(tempfile.mkdtemp(), "nested", ".wintrack.lock")

    def test_acquire_release_and_reacquire(self):
        from wintrack.main import SingleInstanceLock

        lock = SingleInstanceLock(self.path)

        assert lock.acquire() is True
        assert os.path.exists(self.path)
        lock.release()

        again = SingleInstanceLock(self.path)
        assert again.acquire() is True
        again.release()

    def test_release_without_acquire_is_noop(self):
        from wintrack.main import SingleInstanceLock

        SingleInstanceLock(self.path).release()

    def test_second_lock_fails_while_held(self):
        from wintrack.main import SingleInstanceLock

        first = SingleInstanceLock(self.path)
        second = SingleInstanceLock(self.path)

        assert first.acquire() is True
        try:
            assert second.acquire() is False
        finally:
            first.release()
