"""Session and scheduled notification sends."""

import logging
from datetime import datetime

from .config_store import ConfigStore
from .messages import boot_message, shutdown_message
from .webhook import WebhookClient, WebhookError

__all__ = ["Notifier"]

logger = logging.getLogger(__name__)


class Notifier:
    """Reads the current webhook settings and hands payloads to the client.

    Every send takes a fresh snapshot from the store, so a save made in the
    configuration window applies to the next notification.
    """

    def __init__(self, store: ConfigStore, client: WebhookClient) -> None:
        self._store = store
        self._client = client

    def deliver(self, markdown: str, kind: str = "notification") -> bool:
        """Send ``markdown`` to the configured webhook.

        Returns True if the endpoint accepted it (or webhooks are disabled).
        Failures are logged, never raised.
        """
        webhook = self._store.read().webhook
        try:
            self._client.send(webhook, markdown)
        except WebhookError as e:
            logger.error(f"Failed to send {kind} webhook: {e}")
            return False
        if webhook.url:
            logger.info(f"Sent {kind} webhook")
        return True

    def notify_boot(self) -> bool:
        """Send the start-up message if enabled. Returns True if one was sent."""
        config = self._store.read()
        if not (config.session_messages.on_boot and config.webhook.url):
            logger.debug("Boot message disabled")
            return False
        return self.deliver(boot_message(datetime.now()), "boot")

    def notify_shutdown(self) -> bool:
        """Send the shutdown message if enabled. Returns True if one was sent."""
        config = self._store.read()
        if not (config.session_messages.on_shutdown and config.webhook.url):
            logger.debug("Shutdown message disabled")
            return False
        return self.deliver(shutdown_message(datetime.now()), "shutdown")
