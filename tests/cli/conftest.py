# tests/cli/conftest.py
"""Shared fixtures for CLI tests."""

import logging
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI callback points the root handler at the runner's stdout."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def importable_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str, str], str]]:
    """Factory writing ``<name>.py`` to a directory on sys.path.

    Returns the module name to pass on the command line.
    """
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    monkeypatch.syspath_prepend(str(source_dir))
    created: list[str] = []

    def _write(name: str, source: str) -> str:
        (source_dir / f"{name}.py").write_text(textwrap.dedent(source))
        created.append(name)
        return name

    yield _write

    for name in created:
        sys.modules.pop(name, None)
