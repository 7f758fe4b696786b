"""Tests for the background task runner."""

import threading
from unittest.mock import Mock

from apscheduler.triggers.interval import IntervalTrigger

from wintrack.tasks import TaskRunner, _run_logged


class TestRunLogged:
    """Tests for the job boundary wrapper."""

    def test_passes_arguments(self):
        func = Mock()

        _run_logged(func, "job", 1, "two")

        func.assert_called_once_with(1, "two")

    def test_exceptions_are_logged(self, caplog):
        func = Mock(side_effect=RuntimeError("boom"))

        _run_logged(func, "save_config")

        assert "Background task save_config failed" in caplog.text


class TestTaskRunner:
    """Tests for TaskRunner."""

    def setup_method(self):
        self.scheduler = Mock()
        self.scheduler.running = False
        self.runner = TaskRunner(self.scheduler)

    def test_every_registers_interval_job(self):
        func = Mock()

        self.runner.every(60, func, job_id="tick")

        kwargs = self.scheduler.add_job.call_args.kwargs
        assert isinstance(kwargs["trigger"], IntervalTrigger)
        assert kwargs["id"] == "tick"
        assert kwargs["args"] == [func, "tick"]
        assert kwargs["max_instances"] == 1

    def test_submit_adds_one_off_job(self):
        func = Mock()

        self.runner.submit(func, "payload", name="send")

        args, kwargs = self.scheduler.add_job.call_args
        assert args == (_run_logged,)
        assert kwargs["args"] == [func, "send", "payload"]
        assert "trigger" not in kwargs

    def test_start_and_shutdown(self):
        self.runner.start()
        self.scheduler.start.assert_called_once()

        self.scheduler.running = True
        self.runner.shutdown()
        self.scheduler.shutdown.assert_called_once_with(wait=False)

    def test_submitted_job_runs_on_worker_thread(self):
        runner = TaskRunner()
        done = threading.Event()
        threads = []

        def job():
            threads.append(threading.current_thread())
            done.set()

        runner.start()
        try:
            runner.submit(job)
            assert done.wait(timeout=5)
        finally:
            runner.shutdown()

        assert threads[0] is not threading.current_thread()
