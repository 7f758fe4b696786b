"""Markdown text for each notification kind."""

from datetime import datetime

from .config import MARKDOWN_MARKER

__all__ = [
    "boot_message",
    "shutdown_message",
    "elapsed_message",
    "substitute",
]

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def boot_message(now: datetime) -> str:
    """Message sent when WinTrack starts with the machine."""
    return (
        "## 🖥️ Computer started\n\n"
        f"**Time**: {now.strftime(TIME_FORMAT)}\n\n"
        "*Recorded by WinTrack*"
    )


def shutdown_message(now: datetime) -> str:
    """Message sent when WinTrack exits."""
    return (
        "## 🔌 Computer shutting down\n\n"
        f"**Time**: {now.strftime(TIME_FORMAT)}\n\n"
        "*Recorded by WinTrack*"
    )


def elapsed_message(now: datetime, hours: int, minutes: int) -> str:
    """Periodic uptime reminder.

    Args:
        now: Current local time
        hours: Whole hours since the last reminder (or startup)
        minutes: Remaining minutes past ``hours``
    """
    return (
        "## ⏰ Scheduled reminder\n\n"
        f"**Time**: {now.strftime(TIME_FORMAT)}\n\n"
        f"**Elapsed**: {hours} hours {minutes} minutes\n\n"
        "*WinTrack scheduled reminder*"
    )


def substitute(template: str, markdown: str) -> str:
    """Insert ``markdown`` in place of the marker in a body template.

    A template without the marker is returned unchanged.
    """
    return template.replace(MARKDOWN_MARKER, markdown)
