"""Configuration management for WinTrack."""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

__all__ = [
    "Config",
    "ConfigDecodeError",
    "ScheduledMessage",
    "SessionMessageSettings",
    "WebhookSettings",
    "WinTrackError",
    "setup_logging",
    "MARKDOWN_MARKER",
]

logger = logging.getLogger(__name__)

APP_NAME = "WinTrack"
APP_AUTHOR = "win-track"

CONFIG_FILE_ENV = "WINTRACK_CONFIG_FILE"

# Placeholder in the body template replaced by the generated Markdown
MARKDOWN_MARKER = "{{MARKDOWN}}"

DEFAULT_BODY_TEMPLATE = '{"content": "' + MARKDOWN_MARKER + '"}'
DEFAULT_CONTENT_TYPE = "application/json"


class WinTrackError(Exception):
    """Base error for WinTrack."""

    pass


class ConfigDecodeError(WinTrackError, ValueError):
    """Configuration data does not have the expected shape."""

    pass


@dataclass(frozen=True)
class WebhookSettings:
    """Webhook endpoint configuration."""

    url: str = ""
    body_template: str = DEFAULT_BODY_TEMPLATE
    content_type: str = DEFAULT_CONTENT_TYPE

    @property
    def enabled(self) -> bool:
        return bool(self.url)


@dataclass(frozen=True)
class SessionMessageSettings:
    """Which power-state transitions are reported."""

    on_boot: bool = True
    on_shutdown: bool = True


@dataclass(frozen=True)
class ScheduledMessage:
    """A recurring uptime message."""

    interval_minutes: int
    enabled: bool


@dataclass(frozen=True)
class Config:
    """Main configuration object.

    Instances are immutable snapshots: the UI builds a new one on every save
    and ``ConfigStore`` swaps it in wholesale, so readers on other threads
    never see a half-updated value.
    """

    webhook: WebhookSettings = field(default_factory=WebhookSettings)
    session_messages: SessionMessageSettings = field(default_factory=SessionMessageSettings)
    scheduled_messages: tuple[ScheduledMessage, ...] = ()

    @classmethod
    def get_config_dir(cls) -> Path:
        """Get the configuration directory path."""
        return Path(user_config_dir(APP_NAME, APP_AUTHOR))

    @classmethod
    def get_log_dir(cls) -> Path:
        """Get the log directory path."""
        return Path(user_log_dir(APP_NAME, APP_AUTHOR))

    @classmethod
    def get_config_file(cls) -> Path:
        """Get the config file path (``WINTRACK_CONFIG_FILE`` overrides it)."""
        override = os.getenv(CONFIG_FILE_ENV)
        if override:
            return Path(override)
        return cls.get_config_dir() / "config.json"

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from file, or return defaults.

        A missing, unreadable or malformed file is never fatal.
        """
        config_file = path or cls.get_config_file()
        if config_file.exists():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                return cls.from_dict(data)
            except Exception as e:
                logger.warning(f"Failed to load config from {config_file}: {e}, using defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: object) -> "Config":
        """Create Config from a decoded JSON document.

        Every field must be present with the right type.

        Raises:
            ConfigDecodeError: If the document does not describe a Config
        """
        root = _expect_dict(data, "config")
        webhook = _expect_dict(_require(root, "webhook", "config"), "webhook")
        session = _expect_dict(
            _require(root, "session_messages", "config"), "session_messages"
        )
        schedules = _require(root, "scheduled_messages", "config")
        if not isinstance(schedules, list):
            raise ConfigDecodeError("scheduled_messages must be a list")

        scheduled_messages = []
        for index, raw in enumerate(schedules):
            where = f"scheduled_messages[{index}]"
            entry = _expect_dict(raw, where)
            interval = _require(entry, "interval_minutes", where)
            # bool is an int subclass; reject it explicitly
            if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
                raise ConfigDecodeError(f"{where}.interval_minutes must be a non-negative integer")
            scheduled_messages.append(
                ScheduledMessage(
                    interval_minutes=interval,
                    enabled=_expect_bool(_require(entry, "enabled", where), f"{where}.enabled"),
                )
            )

        return cls(
            webhook=WebhookSettings(
                url=_expect_str(_require(webhook, "url", "webhook"), "webhook.url"),
                body_template=_expect_str(
                    _require(webhook, "body_template", "webhook"), "webhook.body_template"
                ),
                content_type=_expect_str(
                    _require(webhook, "content_type", "webhook"), "webhook.content_type"
                ),
            ),
            session_messages=SessionMessageSettings(
                on_boot=_expect_bool(
                    _require(session, "on_boot", "session_messages"), "session_messages.on_boot"
                ),
                on_shutdown=_expect_bool(
                    _require(session, "on_shutdown", "session_messages"),
                    "session_messages.on_shutdown",
                ),
            ),
            scheduled_messages=tuple(scheduled_messages),
        )

    def to_dict(self) -> dict:
        """Convert to a JSON-serialisable dictionary."""
        data = asdict(self)
        data["scheduled_messages"] = list(data["scheduled_messages"])
        return data

    def save(self, path: Path | None = None) -> None:
        """Save config to file.

        Raises:
            OSError: If the directory or file cannot be written
        """
        config_file = path or self.get_config_file()
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Config saved to {config_file}")


def _require(data: dict, key: str, where: str) -> object:
    if key not in data:
        raise ConfigDecodeError(f"{where} is missing '{key}'")
    return data[key]


def _expect_dict(value: object, where: str) -> dict:
    if not isinstance(value, dict):
        raise ConfigDecodeError(f"{where} must be an object")
    return value


def _expect_str(value: object, where: str) -> str:
    if not isinstance(value, str):
        raise ConfigDecodeError(f"{where} must be a string")
    return value


def _expect_bool(value: object, where: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigDecodeError(f"{where} must be a boolean")
    return value


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    log_dir = Config.get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "wintrack.log"

    level = logging.DEBUG if debug else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )

    # Reduce noise from libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
