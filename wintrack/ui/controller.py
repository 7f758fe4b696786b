"""UI event loop state: the single configuration window and exit handling."""

import itertools
import json
import logging
from typing import Callable, Optional, Protocol
from urllib.parse import quote, unquote, urlsplit

from ..config import Config, ConfigDecodeError
from ..config_store import ConfigStore
from ..events import EventBridge, UIEvent, UIEventKind
from ..notifier import Notifier

__all__ = [
    "UIController",
    "ConfigView",
    "WindowFactory",
    "build_save_url",
    "CLOSE_URL",
]

logger = logging.getLogger(__name__)

SAVE_URL = "wintrack://save"
CLOSE_URL = "wintrack://close"


def build_save_url(config: Config) -> str:
    """Encode a configuration as the view's save navigation."""
    payload = json.dumps(config.to_dict(), ensure_ascii=False)
    return f"{SAVE_URL}?config={quote(payload, safe='')}"


class ConfigView(Protocol):
    """What the controller needs from a configuration window."""

    def focus(self) -> None: ...

    def destroy(self) -> None: ...


# (config snapshot, window id, navigation handler, native close handler) -> view
WindowFactory = Callable[
    [Config, int, Callable[[str], bool], Callable[[int], None]], ConfigView
]


class UIController:
    """Consumes the event bridge on the UI thread.

    Events are handled one at a time and never re-entrantly, so the window
    state needs no locking. At most one configuration window exists; a
    second open request while one is showing is ignored. Saved, closed and
    native-close events all converge on the same cleared state, and each is
    a no-op when no window is open.
    """

    def __init__(
        self,
        bridge: EventBridge,
        store: ConfigStore,
        notifier: Notifier,
        window_factory: WindowFactory,
        persist: Callable[[Config], None],
        on_exit: Optional[Callable[[], None]] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            bridge: Event mailbox this controller drains
            store: Shared configuration
            notifier: Used for the shutdown message on exit
            window_factory: Builds a configuration window on the UI thread
            persist: Hands a saved config to the background; must not block
            on_exit: Stops the UI main loop
        """
        self._bridge = bridge
        self._store = store
        self._notifier = notifier
        self._window_factory = window_factory
        self._persist = persist
        self._on_exit = on_exit

        self._window: Optional[ConfigView] = None
        self._window_id: Optional[int] = None
        self._ids = itertools.count(1)
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def has_open_window(self) -> bool:
        return self._window is not None

    @property
    def open_window_id(self) -> Optional[int]:
        return self._window_id

    def pump(self) -> int:
        """Handle every queued event. Returns how many were handled."""
        handled = 0
        for event in self._bridge.drain():
            if not self._running:
                break
            self.handle(event)
            handled += 1
        return handled

    def handle(self, event: UIEvent) -> None:
        """Apply one event."""
        kind = event.kind
        if kind == UIEventKind.OPEN_CONFIG_REQUESTED:
            self._open_config()
        elif kind in (UIEventKind.CONFIG_SAVED, UIEventKind.CONFIG_WINDOW_CLOSED):
            self._close_window()
        elif kind == UIEventKind.NATIVE_WINDOW_CLOSE_REQUESTED:
            if event.window_id is not None and event.window_id == self._window_id:
                self._close_window()
            else:
                logger.debug(f"Ignoring close request for stale window {event.window_id}")
        elif kind == UIEventKind.EXIT_REQUESTED:
            self._exit()

    # -- View boundary ----------------------------------------------------

    def handle_navigation(self, url: str) -> bool:
        """Intercept navigations from the configuration view.

        Returns False when the URL was a WinTrack action (the view must not
        follow it), True otherwise.
        """
        # Some views rewrite custom schemes (wintrack:// -> http://wintrack./),
        # so match loosely.
        if "save" in url and "config=" in url:
            self._handle_save(url)
            return False
        if "wintrack" in url and "close" in url:
            self._bridge.post(UIEvent.config_window_closed())
            return False
        return True

    def request_native_close(self, window_id: int) -> None:
        """Called when the platform asks to close a window."""
        self._bridge.post(UIEvent.native_close(window_id))

    def _handle_save(self, url: str) -> None:
        try:
            new_config = _decode_save_url(url)
        except ConfigDecodeError as e:
            logger.warning(f"Ignoring invalid configuration from view: {e}")
            return

        self._persist(new_config)
        self._bridge.post(UIEvent.config_saved())
        logger.info("Configuration saved from view")

    # -- Transitions ------------------------------------------------------

    def _open_config(self) -> None:
        if self._window is not None:
            logger.debug("Configuration window already open")
            return

        snapshot = self._store.read()
        window_id = next(self._ids)
        try:
            window = self._window_factory(
                snapshot, window_id, self.handle_navigation, self.request_native_close
            )
        except Exception:
            logger.exception("Failed to create configuration window")
            return

        self._window = window
        self._window_id = window_id
        window.focus()
        logger.debug(f"Configuration window {window_id} opened")

    def _close_window(self) -> None:
        if self._window is None:
            return
        window, window_id = self._window, self._window_id
        self._window = None
        self._window_id = None
        try:
            window.destroy()
        except Exception:
            logger.exception(f"Failed to destroy configuration window {window_id}")
        logger.debug(f"Configuration window {window_id} closed")

    def _exit(self) -> None:
        logger.info("Exit requested")
        # Blocking here is fine: the process is about to end
        self._notifier.notify_shutdown()
        self._close_window()
        self._bridge.close()
        self._running = False
        if self._on_exit:
            self._on_exit()


def _decode_save_url(url: str) -> Config:
    """Pull the ``config`` parameter out of a save URL and validate it.

    Raises:
        ConfigDecodeError: If the parameter is missing or not a valid Config
    """
    query = urlsplit(url).query
    values = [
        unquote(part[len("config="):])
        for part in query.split("&")
        if part.startswith("config=")
    ]
    if not values:
        raise ConfigDecodeError("save request has no config parameter")
    try:
        data = json.loads(values[0])
    except ValueError as e:
        raise ConfigDecodeError(f"config parameter is not valid JSON: {e}") from e
    return Config.from_dict(data)
