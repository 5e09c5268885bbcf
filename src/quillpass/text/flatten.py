"""Flatten a content tree into plain text plus a position map.

Text-based tools (grammar checkers, regex scanners) work on linear text;
editors address content by tree position.  :func:`flatten` produces both
the text and the table needed to translate offsets back (see
:mod:`quillpass.text.resolve`).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from quillpass.models.content import BLOCK_NODE_TYPES, ContentNode


@dataclass(frozen=True)
class PositionMapEntry:
    """Anchors a plain-text offset to a tree position.

    ``atomic_span`` is set for atomic inline nodes and holds the length of
    the label written into the text for that node.
    """

    text_offset: int
    tree_position: int
    atomic_span: int | None = None


@dataclass
class FlattenResult:
    text: str
    positions: list[PositionMapEntry] = field(default_factory=list)


@dataclass
class _TextBuffer:
    """Accumulator threaded through the traversal."""

    parts: list[str] = field(default_factory=list)
    positions: list[PositionMapEntry] = field(default_factory=list)
    length: int = 0

    def mark(self, tree_position: int, atomic_span: int | None = None) -> None:
        self.positions.append(PositionMapEntry(self.length, tree_position, atomic_span))

    def write(self, chunk: str) -> None:
        if chunk:
            self.parts.append(chunk)
            self.length += len(chunk)

    def ends_with_newline(self) -> bool:
        return bool(self.parts) and self.parts[-1].endswith("\n")


def flatten(root: ContentNode) -> FlattenResult:
    """Convert *root* to plain text with a position map.

    Block nodes are separated by single newlines, atomic inline nodes are
    rendered as their label, and trailing whitespace is trimmed.
    """
    buf = _TextBuffer()
    _walk(root, buf, 0, is_root=True)
    return FlattenResult(text="".join(buf.parts).rstrip(), positions=buf.positions)


def _walk(node: ContentNode, buf: _TextBuffer, tree_pos: int, *, is_root: bool) -> int:
    """Append *node* to *buf* starting at *tree_pos*; return the next tree position."""
    if node.type == "text":
        if node.text:
            buf.mark(tree_pos)
            buf.write(node.text)
            tree_pos += len(node.text)
        return tree_pos

    if node.is_atomic:
        label = node.label
        buf.mark(tree_pos, atomic_span=len(label))
        buf.write(label)
        return tree_pos + 1

    if not is_root:
        tree_pos += 1  # opening slot

    if node.content is not None:
        for child in node.content:
            tree_pos = _walk(child, buf, tree_pos, is_root=False)
        if not is_root:
            tree_pos += 1  # closing slot

    if node.type in BLOCK_NODE_TYPES and buf.length and not buf.ends_with_newline():
        buf.mark(tree_pos)
        buf.write("\n")

    return tree_pos


def flatten_text(root: ContentNode) -> str:
    """Shortcut for ``flatten(root).text``."""
    return flatten(root).text
