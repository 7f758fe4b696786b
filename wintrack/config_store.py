"""Thread-safe holder for the shared configuration value."""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import Config, WinTrackError

__all__ = ["ConfigStore", "PersistError", "ReadWriteLock"]

logger = logging.getLogger(__name__)


class PersistError(WinTrackError):
    """Configuration could not be written to disk."""

    def __init__(self, path: Path, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Failed to save config to {path}: {error}")


class ReadWriteLock:
    """Many concurrent readers or one writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a save.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ConfigStore:
    """Owns the single configuration value.

    ``read()`` hands out immutable snapshots and may be called from any
    thread. ``replace()`` swaps the value and writes it through to disk; if
    the write fails the new value stays in memory and the next successful
    ``replace()`` brings the file back in line.
    """

    def __init__(self, config: Optional[Config] = None, path: Optional[Path] = None):
        self._path = path or Config.get_config_file()
        self._config = config if config is not None else Config()
        self._lock = ReadWriteLock()
        # Serialises whole replace() calls so the file ends up holding the
        # most recently swapped value.
        self._save_lock = threading.Lock()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ConfigStore":
        """Create a store seeded from the config file (defaults if unusable)."""
        path = path or Config.get_config_file()
        config = Config.load(path)
        logger.info(f"Configuration loaded from {path}")
        return cls(config, path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Config:
        """Return the current configuration snapshot."""
        with self._lock.read():
            return self._config

    def replace(self, new_config: Config) -> None:
        """Swap in a new configuration, then persist it.

        Raises:
            PersistError: If writing the file failed. The in-memory value
                has already been replaced.
        """
        with self._save_lock:
            with self._lock.write():
                self._config = new_config
            try:
                new_config.save(self._path)
            except OSError as e:
                raise PersistError(self._path, e) from e
