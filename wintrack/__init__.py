"""WinTrack - boot, shutdown and uptime notifications to a webhook."""

__version__ = "0.1.0"
