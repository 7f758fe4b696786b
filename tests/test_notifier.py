"""Tests for session notifications, end to end through the webhook client."""

import json
import tempfile
from dataclasses import replace
from pathlib import Path
from unittest.mock import Mock

import responses

from wintrack.config import Config, SessionMessageSettings
from wintrack.config_store import ConfigStore
from wintrack.notifier import Notifier
from wintrack.webhook import TransportError, WebhookClient

URL = "https://hooks.example.com/notify"


class TestNotifier:
    """Tests for Notifier with a real WebhookClient and mocked HTTP."""

    def setup_method(self):
        """Set up test fixtures."""
        self.path = Path(tempfile.mkdtemp()) / "config.json"
        # Defaults, with only the URL filled in
        defaults = Config.load(self.path)
        config = replace(defaults, webhook=replace(defaults.webhook, url=URL))
        self.store = ConfigStore(config, self.path)
        self.client = WebhookClient()
        self.notifier = Notifier(self.store, self.client)

    def teardown_method(self):
        """Clean up."""
        self.client.close()

    @responses.activate
    def test_boot_sends_one_post(self):
        responses.add(responses.POST, URL, status=200)

        assert self.notifier.notify_boot() is True

        assert len(responses.calls) == 1
        request = responses.calls[0].request
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.body)
        assert set(body) == {"content"}
        assert "Computer started" in body["content"]

    @responses.activate
    def test_boot_disabled(self):
        config = self.store.read()
        self.store.replace(
            replace(config, session_messages=SessionMessageSettings(on_boot=False))
        )

        assert self.notifier.notify_boot() is False
        assert len(responses.calls) == 0

    @responses.activate
    def test_boot_without_url(self):
        self.store.replace(Config())

        assert self.notifier.notify_boot() is False
        assert len(responses.calls) == 0

    @responses.activate
    def test_shutdown_sends_one_post(self):
        responses.add(responses.POST, URL, status=200)

        assert self.notifier.notify_shutdown() is True

        body = json.loads(responses.calls[0].request.body)
        assert "shutting down" in body["content"]

    @responses.activate
    def test_shutdown_disabled(self):
        config = self.store.read()
        self.store.replace(
            replace(config, session_messages=SessionMessageSettings(on_shutdown=False))
        )

        assert self.notifier.notify_shutdown() is False
        assert len(responses.calls) == 0

    @responses.activate
    def test_rejected_delivery_is_logged_not_raised(self, caplog):
        responses.add(responses.POST, URL, status=500, body="oops")

        assert self.notifier.deliver("hello", "scheduled") is False
        assert "Failed to send scheduled webhook" in caplog.text

    @responses.activate
    def test_invalid_template_is_logged_not_raised(self):
        config = self.store.read()
        self.store.replace(
            replace(config, webhook=replace(config.webhook, body_template="{{MARKDOWN}}"))
        )

        assert self.notifier.deliver("plain text") is False
        assert len(responses.calls) == 0

    def test_deliver_uses_latest_webhook_settings(self):
        client = Mock()
        notifier = Notifier(self.store, client)
        new_config = replace(
            self.store.read(), webhook=replace(self.store.read().webhook, url="https://new.example")
        )
        self.store.replace(new_config)

        notifier.deliver("hello")

        client.send.assert_called_once_with(new_config.webhook, "hello")

    def test_transport_error_returns_false(self):
        client = Mock()
        client.send.side_effect = TransportError("down")

        assert Notifier(self.store, client).deliver("hello") is False
