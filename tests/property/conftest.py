# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Strategy Categories:
- Document data (the plain shapes a config file can hold)
- Keys and comments
- Whole documents

Usage:
    from tests.property.conftest import documents

    @given(document=documents())
    def test_round_trip(document: ConfigDocument) -> None:
        ...
"""

from __future__ import annotations

from typing import Any

from hypothesis import strategies as st

from dough.core.document import ConfigDocument
from dough.core.values import TypedValue

# =============================================================================
# Text
# =============================================================================

# Printable text only: no surrogates, control characters, line/paragraph
# separators, private-use, unassigned or format characters
text_characters = st.characters(
    codec="utf-8",
    exclude_categories=("Cs", "Cc", "Zl", "Zp", "Co", "Cn", "Cf"),
)

texts = st.text(text_characters, max_size=40)

# Identifier-like keys, as declared by configurable variables
keys = st.from_regex(r"[A-Za-z][A-Za-z0-9_.]{0,39}", fullmatch=True)


def _normalize_comment(text: str) -> str | None:
    return " ".join(text.split()) or None


# Comments as the serializer writes them: one line, single-spaced
comments = st.none() | st.text(text_characters, max_size=60).map(_normalize_comment)

# =============================================================================
# Document Data
# =============================================================================

scalars = st.one_of(
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False),
    texts,
    st.dates(),
)

plain_data: st.SearchStrategy[Any] = st.recursive(
    scalars,
    lambda children: st.lists(children, max_size=4) | st.dictionaries(keys, children, max_size=4),
    max_leaves=12,
)


@st.composite
def documents(draw: st.DrawFn, max_entries: int = 8) -> ConfigDocument:
    """Documents with unique keys, arbitrary plain data and optional comments."""
    names = draw(st.lists(keys, max_size=max_entries, unique=True))
    document = ConfigDocument()
    for name in names:
        document.put(name, TypedValue(draw(plain_data), draw(comments)))
    return document
