# tests/conftest.py
"""Shared test fixtures and helpers.

Scan targets are ordinary modules and classes. ``make_module`` builds a
throwaway module from source and registers it in sys.modules (so string
annotations resolve and class ``__module__`` lookups work), removing it
again at teardown. Every test that defines configurable variables should
declare them in a fresh module or class, because binding mutates them.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import itertools
import os
import sys
import textwrap
import types
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from dough.core.manager import ConfigManager, set_manager

# =============================================================================
# Hypothesis Profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Scan Target Fixtures
# =============================================================================

_module_ids = itertools.count()

MODULE_PRELUDE = """\
from typing import Annotated, ClassVar

from dough.core.descriptors import ConfigValue
"""


@pytest.fixture
def make_module() -> Iterator[Callable[[str], types.ModuleType]]:
    """Factory building a fresh, importable module from source.

    The source is dedented and prefixed with imports of Annotated, ClassVar
    and ConfigValue.
    """
    created: list[str] = []

    def _make(source: str) -> types.ModuleType:
        name = f"dough_test_targets_{next(_module_ids)}"
        module = types.ModuleType(name)
        sys.modules[name] = module
        created.append(name)
        exec(MODULE_PRELUDE + textwrap.dedent(source), module.__dict__)
        return module

    yield _make

    for name in created:
        sys.modules.pop(name, None)


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A config directory path that does not exist yet."""
    return tmp_path / "Config"


@pytest.fixture
def process_manager() -> Iterator[ConfigManager]:
    """Fresh process-wide manager, reset after the test."""
    manager = ConfigManager()
    set_manager(manager)
    yield manager
    set_manager(None)
