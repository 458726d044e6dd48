# src/dough/core/store.py
"""Document store: config files on disk <-> documents in memory.

The store maps a file name (extension included) to its ConfigDocument.
Loading creates the directory when it is missing and parses every file with
a recognized extension; a file that cannot be read or parsed is logged and
skipped without affecting the others, and is never overwritten on save.
"""

import os
import shutil
import tempfile
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import structlog

from dough.core.document import ConfigDocument, parse_document, serialize_document
from dough.core.errors import DirectoryCreationError, DocumentParseError, DocumentWriteError

__all__ = [
    "BACKUP_DIR_NAME",
    "DEFAULT_EXTENSIONS",
    "ConfigStore",
    "backup_documents",
    "config_files",
    "ensure_document",
    "load_all",
    "save_all",
]

logger = structlog.get_logger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".cfg",)
BACKUP_DIR_NAME = ".backups"


class ConfigStore:
    """Mapping of file name -> ConfigDocument.

    Attributes:
        failed: File names present on disk that could not be loaded. Their
            documents (if any get created) are kept in memory only.
        directory_failed: The directory could not be created or listed, so
            nothing in it may be overwritten.
    """

    def __init__(self) -> None:
        self._documents: dict[str, ConfigDocument] = {}
        self.failed: set[str] = set()
        self.directory_failed = False

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._documents

    def __getitem__(self, file_name: str) -> ConfigDocument:
        return self._documents[file_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def items(self) -> list[tuple[str, ConfigDocument]]:
        return list(self._documents.items())

    def put(self, file_name: str, document: ConfigDocument) -> None:
        self._documents[file_name] = document

    def ensure_document(self, file_name: str) -> ConfigDocument:
        """Return the document for ``file_name``, registering an empty one if absent."""
        document = self._documents.get(file_name)
        if document is None:
            document = ConfigDocument()
            self._documents[file_name] = document
            logger.debug("config.document_created", file=file_name)
        return document


def ensure_document(store: ConfigStore, file_name: str) -> ConfigDocument:
    return store.ensure_document(file_name)


def _ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(directory, str(e)) from e


def config_files(directory: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[Path]:
    """Recognized config files directly under ``directory``, sorted by name."""
    recognized = set(extensions)
    return sorted(path for path in directory.iterdir() if path.is_file() and path.suffix in recognized)


def load_all(directory: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> ConfigStore:
    """Load every recognized config file in ``directory``.

    Args:
        directory: Root config directory, created if missing
        extensions: Suffixes (dot included) recognized as config files

    Returns:
        A new store. Empty if the directory had to be created, or could not be.
    """
    store = ConfigStore()
    try:
        _ensure_directory(directory)
    except DirectoryCreationError as e:
        logger.critical("config.directory_creation_failed", directory=str(directory), error=e.message)
        store.directory_failed = True
        return store

    try:
        paths = config_files(directory, extensions)
    except OSError as e:
        logger.critical("config.directory_read_failed", directory=str(directory), error=str(e))
        store.directory_failed = True
        return store

    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
            store.put(path.name, parse_document(text, path.name))
        except (OSError, UnicodeDecodeError) as e:
            store.failed.add(path.name)
            logger.error("config.file_read_failed", file=path.name, error=str(e))
        except DocumentParseError as e:
            store.failed.add(path.name)
            logger.error("config.file_parse_failed", file=path.name, error=e.message)

    logger.debug("config.files_loaded", directory=str(directory), count=len(store), failed=sorted(store.failed))
    return store


def _write_text(path: Path, text: str, *, atomic: bool) -> None:
    """Write ``text`` to ``path``, through a temporary sibling file when ``atomic``.

    Raises:
        DocumentWriteError: On any OS-level failure.
    """
    try:
        if not atomic:
            path.write_text(text, encoding="utf-8")
            return
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise DocumentWriteError(path, str(e)) from e


def save_all(store: ConfigStore, directory: Path, *, atomic: bool = True) -> list[str]:
    """Write every document to ``directory/<file name>``, overwriting existing content.

    Files listed in ``store.failed`` are left untouched. A write failure is
    logged and the remaining files are still written.

    Returns:
        Names of the files written.
    """
    written: list[str] = []
    for file_name, document in store.items():
        if file_name in store.failed:
            logger.warning("config.file_save_skipped", file=file_name, reason="file failed to load")
            continue
        path = directory / file_name
        try:
            _write_text(path, serialize_document(document), atomic=atomic)
        except DocumentWriteError as e:
            logger.error("config.file_write_failed", file=file_name, error=e.message)
            continue
        written.append(file_name)
    return written


def backup_documents(
    directory: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    *,
    history: int,
) -> Path | None:
    """Snapshot the recognized config files before they are loaded.

    Copies go to ``directory/.backups/<UTC timestamp>/``. At most ``history``
    snapshots are kept; older ones are removed.

    Returns:
        The snapshot directory, or None when nothing was copied.
    """
    if history <= 0 or not directory.is_dir():
        return None
    try:
        files = config_files(directory, extensions)
    except OSError as e:
        logger.error("config.backup_failed", directory=str(directory), error=str(e))
        return None
    if not files:
        return None

    backups = directory / BACKUP_DIR_NAME
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
    snapshot = backups / stamp
    suffix = 1
    while snapshot.exists():
        snapshot = backups / f"{stamp}-{suffix}"
        suffix += 1
    try:
        snapshot.mkdir(parents=True, exist_ok=True)
        for path in files:
            shutil.copy2(path, snapshot / path.name)
        snapshots = sorted(p for p in backups.iterdir() if p.is_dir())
        for stale in snapshots[:-history]:
            shutil.rmtree(stale)
    except OSError as e:
        logger.error("config.backup_failed", directory=str(directory), error=str(e))
        return None

    logger.debug("config.backup_created", snapshot=str(snapshot), files=len(files))
    return snapshot
