"""System tray icon and menu."""

import logging
import platform
import threading
from typing import Callable, Optional

from PIL import Image, ImageDraw

try:
    import pystray
    from pystray import MenuItem as Item
except ImportError:
    pystray = None
    Item = None

__all__ = ["TrayIcon", "create_icon_image", "ICON_COLOR"]

logger = logging.getLogger(__name__)

APP_TITLE = "WinTrack"
TOOLTIP = "WinTrack - uptime notifications"

ICON_COLOR = "#0078d4"  # Blue


def _hide_from_dock() -> None:
    """Hide the app from the macOS Dock."""
    if platform.system() != "Darwin":
        return
    try:
        import AppKit
        ns_app = AppKit.NSApplication.sharedApplication()
        # NSApplicationActivationPolicyAccessory = 1 (no Dock icon)
        ns_app.setActivationPolicy_(1)
    except Exception:
        logger.debug("Could not hide Dock icon")


def create_icon_image(color: str = ICON_COLOR, size: int = 64) -> Image.Image:
    """Create a simple rounded-square icon.

    Args:
        color: Hex color code
        size: Icon size in pixels

    Returns:
        PIL Image
    """
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)

    margin = size // 8
    draw.rounded_rectangle(
        [margin, margin, size - margin, size - margin],
        radius=size // 8,
        fill=color,
    )

    return image


class TrayIcon:
    """Tray icon with "Configure" and "Exit" actions.

    Menu callbacks run on pystray's thread; they should only post events.
    """

    def __init__(
        self,
        on_open_config: Optional[Callable[[], None]] = None,
        on_quit: Optional[Callable[[], None]] = None,
    ):
        """Initialize tray icon.

        Args:
            on_open_config: Callback when Configure is clicked
            on_quit: Callback when Exit is clicked
        """
        if pystray is None:
            raise ImportError("pystray is required for system tray support")

        self._on_open_config = on_open_config
        self._on_quit = on_quit

        self._icon: Optional[pystray.Icon] = None
        self._thread: Optional[threading.Thread] = None

    def _create_menu(self) -> "pystray.Menu":
        """Create the tray menu."""
        return pystray.Menu(
            Item("Configure", self._handle_open_config, default=True),
            Item("Exit", self._handle_quit),
        )

    def _handle_open_config(self, icon, item) -> None:
        if self._on_open_config:
            self._on_open_config()

    def _handle_quit(self, icon, item) -> None:
        if self._on_quit:
            self._on_quit()

    def start(self) -> None:
        """Start the tray icon in a background thread."""
        if self._icon is not None:
            return

        _hide_from_dock()
        self._icon = pystray.Icon(
            APP_TITLE,
            create_icon_image(),
            TOOLTIP,
            self._create_menu(),
        )

        self._thread = threading.Thread(target=self._icon.run, name="tray-icon", daemon=True)
        self._thread.start()
        logger.info("Tray icon started")

    def stop(self) -> None:
        """Stop the tray icon."""
        if self._icon:
            self._icon.stop()
            self._icon = None
            logger.info("Tray icon stopped")
