"""UI module - tray icon, configuration window and the UI event controller."""

from .controller import UIController

__all__ = ["UIController"]
