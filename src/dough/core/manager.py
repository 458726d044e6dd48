# src/dough/core/manager.py
"""ConfigManager sequences the configuration lifecycle.

init:    load documents -> scan targets -> bind each descriptor -> save
refresh: write each registered variable's current value -> save

init can be called again at any time: it rebuilds the registry and
re-derives the store from disk. refresh never re-scans; it only
round-trips the descriptors captured by the last init.

Typical use goes through the process-wide manager:

    >>> from dough.core import init_config, refresh_config_values
    >>> init_config("Config/")        # scans the calling module
    >>> ...                           # program mutates bound variables
    >>> refresh_config_values()

Thread Safety:
    init and refresh hold a re-entrant lock for their whole run. Reads of
    bound variables are not synchronized; readers see values that are
    consistent as of the last init/refresh.
"""

import sys
import threading
import time
from pathlib import Path

import structlog

from dough.core.binder import bind_all, refresh_all
from dough.core.descriptors import ConfigDescriptor
from dough.core.registry import DescriptorRegistry, ScanTarget
from dough.core.settings import ConfigSettings
from dough.core.store import ConfigStore, backup_documents, load_all, save_all

__all__ = [
    "DEFAULT_DIRECTORY",
    "ConfigManager",
    "get_manager",
    "init_config",
    "refresh_config_values",
    "set_manager",
]

logger = structlog.get_logger(__name__)

DEFAULT_DIRECTORY = "Config/"


def _calling_module(depth: int) -> ScanTarget:
    """Module of the frame ``depth`` levels above this function's caller."""
    frame = sys._getframe(depth + 1)
    module = sys.modules.get(frame.f_globals.get("__name__", ""))
    if module is None:
        raise RuntimeError("Cannot determine the calling module; pass scan targets explicitly")
    return module


def _target_name(target: ScanTarget) -> str:
    if isinstance(target, type):
        return f"{target.__module__}.{target.__qualname__}"
    return target.__name__


class ConfigManager:
    """Owns the config directory, the document store and the descriptor registry."""

    def __init__(self, settings: ConfigSettings | None = None) -> None:
        self._settings = settings if settings is not None else ConfigSettings()
        self._directory = self._settings.directory
        self._store = ConfigStore()
        self._registry = DescriptorRegistry(self._settings.extensions)
        self._lock = threading.RLock()

    @property
    def settings(self) -> ConfigSettings:
        return self._settings

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def registry(self) -> DescriptorRegistry:
        return self._registry

    @property
    def descriptors(self) -> tuple[ConfigDescriptor, ...]:
        return self._registry.descriptors

    def load_config_files(self) -> None:
        """Replace the store with the documents found on disk."""
        backup_documents(self._directory, self._settings.extensions, history=self._settings.backup_history)
        self._store = load_all(self._directory, self._settings.extensions)

    def save_config_files(self) -> list[str]:
        """Write every document to disk. Returns the names written."""
        return save_all(self._store, self._directory, atomic=self._settings.atomic_writes)

    def init_config(self, directory: str | Path | None = None, *scan_targets: ScanTarget) -> None:
        """Load config files, discover descriptors and bind them, then save.

        Args:
            directory: Root config directory. None keeps the settings' directory.
            *scan_targets: Modules/classes to scan, in order. Defaults to the
                calling module.
        """
        if not scan_targets:
            scan_targets = (_calling_module(1),)

        started = time.perf_counter()
        with self._lock:
            self._directory = Path(directory).expanduser() if directory is not None else self._settings.directory
            self.load_config_files()
            self._registry.clear()
            if self._store.directory_failed:
                logger.critical("config.init_aborted", directory=str(self._directory))
                return

            for target in scan_targets:
                self._registry.scan(target)
            bound = bind_all(self._registry, self._store)
            self.save_config_files()

        logger.info(
            "config.initialized",
            directory=str(self._directory),
            targets=[_target_name(target) for target in scan_targets],
            descriptors=len(self._registry),
            bound=bound,
            files=len(self._store),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

    def refresh_config_values(self, *, save: bool = True) -> None:
        """Write every registered variable's current value to its document.

        Args:
            save: Also write the documents to disk.
        """
        with self._lock:
            refreshed = refresh_all(self._registry, self._store)
            written = self.save_config_files() if save else []
        logger.debug("config.refreshed", refreshed=refreshed, files_written=len(written))


_manager: ConfigManager | None = None
_manager_lock = threading.Lock()


def get_manager() -> ConfigManager:
    """Process-wide ConfigManager, created with default settings on first use."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = ConfigManager()
        return _manager


def set_manager(manager: ConfigManager | None) -> None:
    """Replace the process-wide manager (None resets it)."""
    global _manager
    with _manager_lock:
        _manager = manager


def init_config(directory: str | Path = DEFAULT_DIRECTORY, *scan_targets: ScanTarget) -> None:
    """Initialize configuration on the process-wide manager.

    With no scan targets, the calling module is scanned.
    """
    if not scan_targets:
        scan_targets = (_calling_module(1),)
    get_manager().init_config(directory, *scan_targets)


def refresh_config_values(*, save: bool = True) -> None:
    """Persist the current values of every variable bound by init_config."""
    get_manager().refresh_config_values(save=save)
