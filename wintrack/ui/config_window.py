"""Configuration window using tkinter."""

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable

from ..config import Config, ScheduledMessage, SessionMessageSettings, WebhookSettings
from .controller import CLOSE_URL, build_save_url

__all__ = ["ConfigWindow"]

logger = logging.getLogger(__name__)

WIDTH = 520
HEIGHT = 580
DEFAULT_INTERVAL_MINUTES = 60


class ConfigWindow:
    """Webhook and schedule settings form.

    Must be created and destroyed on the Tk thread. The form never touches
    the shared configuration: Save and Cancel are reported through
    ``on_navigate`` as ``wintrack://`` URLs, and the title-bar close button
    through ``on_close_requested``.
    """

    def __init__(
        self,
        root: tk.Misc,
        config: Config,
        window_id: int,
        on_navigate: Callable[[str], bool],
        on_close_requested: Callable[[int], None],
    ):
        """Initialize and show the window.

        Args:
            root: Hidden Tk root owning the window
            config: Snapshot used to fill the form
            window_id: Identifier reported on native close
            on_navigate: Receives save/close URLs
            on_close_requested: Receives ``window_id`` on native close
        """
        self._config = config
        self._window_id = window_id
        self._on_navigate = on_navigate
        self._on_close_requested = on_close_requested

        self._window = tk.Toplevel(root)
        self._window.title("WinTrack Settings")
        self._window.geometry(f"{WIDTH}x{HEIGHT}")
        self._window.resizable(True, True)

        # Center on screen
        self._window.update_idletasks()
        x = (self._window.winfo_screenwidth() - WIDTH) // 2
        y = (self._window.winfo_screenheight() - HEIGHT) // 2
        self._window.geometry(f"+{x}+{y}")

        self._build()

        self._window.bind("<Escape>", lambda e: self._cancel())
        self._window.protocol("WM_DELETE_WINDOW", self._native_close)

    def _build(self) -> None:
        frame = ttk.Frame(self._window, padding=20)
        frame.pack(fill=tk.BOTH, expand=True)

        # Webhook
        webhook_frame = ttk.LabelFrame(frame, text="Webhook", padding=10)
        webhook_frame.pack(fill=tk.X, pady=(0, 10))

        ttk.Label(webhook_frame, text="URL:").pack(anchor=tk.W)
        self._url_var = tk.StringVar(value=self._config.webhook.url)
        ttk.Entry(webhook_frame, textvariable=self._url_var).pack(fill=tk.X)

        ttk.Label(
            webhook_frame,
            text="Body template ({{MARKDOWN}} is replaced by the message):",
        ).pack(anchor=tk.W, pady=(8, 0))
        self._body_text = tk.Text(webhook_frame, height=6, wrap=tk.WORD)
        self._body_text.insert("1.0", self._config.webhook.body_template)
        self._body_text.pack(fill=tk.X)

        ttk.Label(webhook_frame, text="Content-Type:").pack(anchor=tk.W, pady=(8, 0))
        self._content_type_var = tk.StringVar(value=self._config.webhook.content_type)
        ttk.Entry(webhook_frame, textvariable=self._content_type_var).pack(fill=tk.X)

        # Session messages
        session_frame = ttk.LabelFrame(frame, text="Session messages", padding=10)
        session_frame.pack(fill=tk.X, pady=10)

        self._on_boot_var = tk.BooleanVar(value=self._config.session_messages.on_boot)
        ttk.Checkbutton(
            session_frame, text="Send a message at start-up", variable=self._on_boot_var
        ).pack(anchor=tk.W)

        self._on_shutdown_var = tk.BooleanVar(
            value=self._config.session_messages.on_shutdown
        )
        ttk.Checkbutton(
            session_frame, text="Send a message at shutdown", variable=self._on_shutdown_var
        ).pack(anchor=tk.W)

        # Scheduled message (only the first entry is editable)
        schedule = (
            self._config.scheduled_messages[0] if self._config.scheduled_messages else None
        )
        schedule_frame = ttk.LabelFrame(frame, text="Scheduled reminder", padding=10)
        schedule_frame.pack(fill=tk.X, pady=10)

        self._schedule_enabled_var = tk.BooleanVar(value=bool(schedule and schedule.enabled))
        ttk.Checkbutton(
            schedule_frame, text="Send a reminder", variable=self._schedule_enabled_var
        ).pack(anchor=tk.W)

        interval_frame = ttk.Frame(schedule_frame)
        interval_frame.pack(fill=tk.X, pady=2)
        ttk.Label(interval_frame, text="Every").pack(side=tk.LEFT)
        self._interval_var = tk.StringVar(
            value=str(schedule.interval_minutes if schedule else DEFAULT_INTERVAL_MINUTES)
        )
        ttk.Entry(interval_frame, textvariable=self._interval_var, width=8).pack(
            side=tk.LEFT, padx=5
        )
        ttk.Label(interval_frame, text="minutes").pack(side=tk.LEFT)

        # Buttons
        button_frame = ttk.Frame(frame)
        button_frame.pack(fill=tk.X, pady=(10, 0))
        ttk.Button(button_frame, text="Cancel", command=self._cancel).pack(side=tk.LEFT)
        ttk.Button(button_frame, text="Save", command=self._save).pack(side=tk.RIGHT)

    def _collect(self) -> Config:
        """Build a Config from the form.

        Raises:
            ValueError: If the interval is not a non-negative whole number
        """
        raw_interval = self._interval_var.get().strip()
        interval = int(raw_interval)
        if interval < 0:
            raise ValueError("Interval must not be negative")

        schedules = list(self._config.scheduled_messages)
        first = ScheduledMessage(
            interval_minutes=interval, enabled=self._schedule_enabled_var.get()
        )
        if schedules:
            schedules[0] = first
        else:
            schedules.append(first)

        return Config(
            webhook=WebhookSettings(
                url=self._url_var.get().strip(),
                # Text widgets always append a trailing newline
                body_template=self._body_text.get("1.0", "end-1c"),
                content_type=self._content_type_var.get().strip(),
            ),
            session_messages=SessionMessageSettings(
                on_boot=self._on_boot_var.get(),
                on_shutdown=self._on_shutdown_var.get(),
            ),
            scheduled_messages=tuple(schedules),
        )

    def _save(self) -> None:
        try:
            config = self._collect()
        except ValueError:
            messagebox.showerror(
                "Invalid Input",
                "The reminder interval must be a whole number of minutes.",
                parent=self._window,
            )
            return
        self._on_navigate(build_save_url(config))

    def _cancel(self) -> None:
        self._on_navigate(CLOSE_URL)

    def _native_close(self) -> None:
        self._on_close_requested(self._window_id)

    def focus(self) -> None:
        self._window.deiconify()
        self._window.lift()
        self._window.focus_force()

    def destroy(self) -> None:
        self._window.destroy()
