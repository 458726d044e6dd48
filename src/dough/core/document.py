# src/dough/core/document.py
"""Config documents and their on-disk text format.

A ConfigDocument is an ordered mapping of key -> TypedValue. On disk it is
a single YAML mapping, one top-level key per entry, written in insertion
order. Comments live next to the entry they describe:

    Fullscreen: false  # Start the window in fullscreen
    # Key bindings for the debug overlay
    Overlay:
      Toggle: F3
      Reload: F5

An entry that fits on one line carries its comment inline; a multi-line
entry carries it on the line directly above. Both positions are recognized
when reading, so comments edited by hand survive a load/save cycle.
"""

import re
from collections.abc import Iterator, Mapping

import yaml

from dough.core.errors import DocumentParseError
from dough.core.values import TypedValue

__all__ = [
    "ConfigDocument",
    "parse_document",
    "serialize_document",
]

# Values are never wrapped across lines (keeps inline comments valid)
_NO_WRAP = 2**31 - 1

# Line breaks as counted by the YAML scanner marks
_LINE_BREAK = re.compile(r"\r\n|[\r\n\x85\u2028\u2029]")


class ConfigDocument:
    """In-memory contents of one config file."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, TypedValue] | None = None) -> None:
        self._entries: dict[str, TypedValue] = dict(entries) if entries else {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigDocument({self._entries!r})"

    def get(self, key: str) -> TypedValue | None:
        """Return the entry stored under ``key``, or None."""
        return self._entries.get(key)

    def put(self, key: str, value: TypedValue) -> None:
        """Insert or overwrite an entry. An overwritten key keeps its position."""
        self._entries[key] = value

    def keys(self) -> list[str]:
        return list(self._entries)

    def items(self) -> list[tuple[str, TypedValue]]:
        return list(self._entries.items())


def _single_line(comment: str | None) -> str | None:
    if comment is None:
        return None
    collapsed = " ".join(comment.split())
    return collapsed or None


def _render_entry(key: str, entry: TypedValue) -> str:
    text = yaml.safe_dump(
        {key: entry.value},
        default_flow_style=None,
        sort_keys=False,
        allow_unicode=True,
        width=_NO_WRAP,
    )
    lines = text.rstrip("\n").split("\n")
    comment = _single_line(entry.comment)
    if comment is not None:
        if len(lines) == 1:
            lines[0] = f"{lines[0]}  # {comment}"
        else:
            lines.insert(0, f"# {comment}")
    return "\n".join(lines) + "\n"


def serialize_document(document: ConfigDocument) -> str:
    """Render a document as text. The same document always renders the same."""
    return "".join(_render_entry(key, entry) for key, entry in document.items())


def _trailing_comment(rest: str) -> str | None:
    rest = rest.strip()
    if not rest.startswith("#"):
        return None
    return rest[1:].strip() or None


def _comment_for(lines: list[str], key_node: yaml.Node, value_node: yaml.Node) -> str | None:
    line_no = key_node.start_mark.line
    line = lines[line_no] if line_no < len(lines) else ""

    inline = None
    if value_node.start_mark.line == line_no and value_node.end_mark.line == line_no:
        inline = _trailing_comment(line[value_node.end_mark.column :])
    elif value_node.start_mark.line > line_no:
        after_key = line[key_node.end_mark.column :].lstrip().removeprefix(":")
        inline = _trailing_comment(after_key)
    if inline is not None:
        return inline

    above: list[str] = []
    index = line_no - 1
    while index >= 0 and lines[index].startswith("#"):
        above.append(lines[index][1:].strip())
        index -= 1
    return _single_line(" ".join(reversed(above)))


def parse_document(text: str, file_name: str = "<string>") -> ConfigDocument:
    """Parse config file text into a document.

    Empty and comment-only text yields an empty document.

    Args:
        text: File contents
        file_name: Used in error messages only

    Raises:
        DocumentParseError: On YAML syntax errors, a top level that is not a
            mapping, or a key that is not a string.
    """
    loader = yaml.SafeLoader(text)
    try:
        root = loader.get_single_node()
        if root is None:
            return ConfigDocument()
        if not isinstance(root, yaml.MappingNode):
            raise DocumentParseError(file_name, f"top level must be a mapping, got {root.tag}")

        loader.flatten_mapping(root)
        lines = _LINE_BREAK.split(text)
        entries: dict[str, TypedValue] = {}
        for key_node, value_node in root.value:
            key = loader.construct_object(key_node, deep=True)
            if not isinstance(key, str):
                raise DocumentParseError(
                    file_name,
                    f"keys must be strings, got {key!r} on line {key_node.start_mark.line + 1}",
                )
            value = loader.construct_object(value_node, deep=True)
            entries[key] = TypedValue(value, _comment_for(lines, key_node, value_node))
        return ConfigDocument(entries)
    except yaml.YAMLError as e:
        raise DocumentParseError(file_name, str(e)) from e
    finally:
        loader.dispose()
