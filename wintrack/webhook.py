"""Webhook delivery for WinTrack notifications."""

import json
import logging
from typing import Optional

import requests

from . import __version__
from .config import WebhookSettings
from .messages import substitute

__all__ = [
    "WebhookClient",
    "WebhookError",
    "InvalidBodyError",
    "RemoteRejectedError",
    "TransportError",
]

logger = logging.getLogger(__name__)


class WebhookError(Exception):
    """Webhook delivery error."""

    pass


class InvalidBodyError(WebhookError):
    """Body template does not yield a JSON object after substitution."""

    pass


class RemoteRejectedError(WebhookError):
    """Endpoint answered with a non-2xx status."""

    def __init__(self, status: int, body_text: str):
        self.status = status
        self.body_text = body_text
        super().__init__(f"Webhook rejected ({status}): {body_text}")


class TransportError(WebhookError):
    """Request never got a response (DNS, connection, timeout, bad URL)."""

    pass


class WebhookClient:
    """Posts notification payloads to the configured endpoint.

    Delivery is best effort: no retry, no backoff. Callers log failures and
    move on.
    """

    USER_AGENT = f"WinTrack/{__version__}"

    def __init__(
        self,
        timeout: Optional[float] = 30,
        session: Optional[requests.Session] = None,
    ):
        """Initialize webhook client.

        Args:
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional requests session (for dependency injection/testing)
        """
        self.timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._closed = False

    def build_body(self, webhook: WebhookSettings, markdown: str) -> dict:
        """Substitute ``markdown`` into the body template and parse it.

        The generated Markdown is multi-line, so raw control characters are
        accepted inside JSON strings.

        Raises:
            InvalidBodyError: If the result is not a JSON object
        """
        body = substitute(webhook.body_template, markdown)
        try:
            parsed = json.loads(body, strict=False)
        except ValueError as e:
            raise InvalidBodyError(
                f"Body must be valid JSON once the placeholder is replaced: {e}"
            ) from e
        if not isinstance(parsed, dict):
            raise InvalidBodyError(
                f"Body must be a JSON object, got {type(parsed).__name__}"
            )
        return parsed

    def send(self, webhook: WebhookSettings, markdown: str) -> None:
        """Deliver ``markdown`` to the webhook.

        An empty URL means webhooks are disabled; nothing is sent.

        Raises:
            InvalidBodyError: Template problem, no request was made
            RemoteRejectedError: Non-2xx response
            TransportError: No response received
        """
        if not webhook.url:
            logger.debug("Webhook URL not configured, skipping send")
            return

        if self._closed:
            raise TransportError("Webhook client is closed")
        payload = self.build_body(webhook, markdown)
        headers = {
            "Content-Type": webhook.content_type,
            "User-Agent": self.USER_AGENT,
        }
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        try:
            response = self._session.post(
                webhook.url, data=data, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Webhook request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise RemoteRejectedError(response.status_code, response.text)

        logger.debug(f"Webhook delivered ({response.status_code})")

    def close(self) -> None:
        """Close the session if we own it. Later sends raise TransportError."""
        self._closed = True
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "WebhookClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
