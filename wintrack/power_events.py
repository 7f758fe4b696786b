"""OS shutdown / log-off listeners.

Platform-specific implementations:
- macOS: pyobjc NSWorkspace power-off notification
- Windows: ctypes hidden message-only window (WM_QUERYENDSESSION)

Elsewhere only POSIX signals (handled in ``main``) end the session.
"""

import logging
import platform
import threading
from typing import Callable

__all__ = ["start_shutdown_listener"]

logger = logging.getLogger(__name__)

_system = platform.system()


def start_shutdown_listener(on_shutdown: Callable[[], object]) -> bool:
    """Start a daemon-thread listener that calls ``on_shutdown`` once the OS
    announces it is powering off or ending the user session.

    Returns True if a listener was started.
    """
    if _system == "Darwin":
        return _start_macos_listener(on_shutdown)
    if _system == "Windows":
        return _start_windows_listener(on_shutdown)
    logger.debug(f"OS shutdown notifications not supported on {_system}")
    return False


# ---------------------------------------------------------------------------
# macOS: NSWorkspace notifications
# ---------------------------------------------------------------------------

def _start_macos_listener(on_shutdown: Callable[[], object]) -> bool:
    try:
        from Foundation import NSObject
        from AppKit import NSWorkspace
        from PyObjCTools import AppHelper
    except ImportError:
        logger.warning("pyobjc not available, shutdown detection disabled")
        return False

    class _PowerObserver(NSObject):
        def handleShutdown_(self, notification):
            logger.info("System shutdown detected")
            _safe_call(on_shutdown)

    def run_loop():
        observer = _PowerObserver.alloc().init()
        center = NSWorkspace.sharedWorkspace().notificationCenter()
        center.addObserver_selector_name_object_(
            observer, "handleShutdown:",
            "NSWorkspaceWillPowerOffNotification", None,
        )
        logger.debug("macOS shutdown listener started")
        AppHelper.runConsoleEventLoop()

    thread = threading.Thread(target=run_loop, name="shutdown-listener", daemon=True)
    thread.start()
    return True


# ---------------------------------------------------------------------------
# Windows: hidden message-only window
# ---------------------------------------------------------------------------

def _start_windows_listener(on_shutdown: Callable[[], object]) -> bool:
    import ctypes
    import ctypes.wintypes as wintypes

    user32 = ctypes.windll.user32
    kernel32 = ctypes.windll.kernel32

    WM_QUERYENDSESSION = 0x0011
    HWND_MESSAGE = -3

    WNDPROC = ctypes.WINFUNCTYPE(
        ctypes.c_long, wintypes.HWND, ctypes.c_uint, wintypes.WPARAM, wintypes.LPARAM,
    )

    def wnd_proc(hwnd, msg, wparam, lparam):
        if msg == WM_QUERYENDSESSION:
            logger.info("System shutdown detected")
            _safe_call(on_shutdown)
            return 1  # Allow shutdown to proceed
        return user32.DefWindowProcW(hwnd, msg, wparam, lparam)

    def run_message_pump():
        wnd_proc_cb = WNDPROC(wnd_proc)
        class_name = "WinTrackShutdownEvents"

        class WNDCLASSW(ctypes.Structure):
            _fields_ = [
                ("style", wintypes.UINT),
                ("lpfnWndProc", WNDPROC),
                ("cbClsExtra", ctypes.c_int),
                ("cbWndExtra", ctypes.c_int),
                ("hInstance", wintypes.HINSTANCE),
                ("hIcon", wintypes.HICON),
                ("hCursor", wintypes.HANDLE),
                ("hbrBackground", wintypes.HBRUSH),
                ("lpszMenuName", wintypes.LPCWSTR),
                ("lpszClassName", wintypes.LPCWSTR),
            ]

        wc = WNDCLASSW()
        wc.lpfnWndProc = wnd_proc_cb
        wc.hInstance = kernel32.GetModuleHandleW(None)
        wc.lpszClassName = class_name

        if not user32.RegisterClassW(ctypes.byref(wc)):
            logger.warning("Failed to register window class for shutdown events")
            return

        hwnd = user32.CreateWindowExW(
            0, class_name, "WinTrack Shutdown Events", 0,
            0, 0, 0, 0,
            HWND_MESSAGE, None, wc.hInstance, None,
        )
        if not hwnd:
            logger.warning("Failed to create message window for shutdown events")
            return

        logger.debug("Windows shutdown listener started")

        msg = wintypes.MSG()
        while user32.GetMessageW(ctypes.byref(msg), None, 0, 0) > 0:
            user32.TranslateMessage(ctypes.byref(msg))
            user32.DispatchMessageW(ctypes.byref(msg))

    thread = threading.Thread(target=run_message_pump, name="shutdown-listener", daemon=True)
    thread.start()
    return True


def _safe_call(fn: Callable, *args) -> None:
    """Call a function, catching and logging any exceptions."""
    try:
        fn(*args)
    except Exception:
        logger.exception(f"Error in shutdown callback {getattr(fn, '__name__', fn)}")
