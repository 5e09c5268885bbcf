"""Tree-position arithmetic over content nodes.

A tree position counts slots the way the editor does: every non-root node
other than a text leaf opens one slot, containers close one more, and text
leaves occupy one slot per character.  Atomic inline nodes occupy exactly
one slot whatever their rendered label.
"""

from __future__ import annotations

from collections.abc import Iterator

from quillpass.models.content import ContentNode


def node_size(node: ContentNode) -> int:
    """Number of tree positions occupied by *node*."""
    if node.type == "text":
        return len(node.text or "")
    if node.is_atomic:
        return 1
    if node.content is None:
        return 1
    return 2 + sum(node_size(child) for child in node.content)


def content_size(node: ContentNode) -> int:
    """Number of tree positions occupied by the children of *node*."""
    return sum(node_size(child) for child in node.content or [])


def node_text(node: ContentNode) -> str:
    """Rendered text of *node*: text leaves plus atomic labels, no separators."""
    if node.type == "text":
        return node.text or ""
    if node.is_atomic:
        return node.label
    return "".join(node_text(child) for child in node.content or [])


def iter_positioned(root: ContentNode) -> Iterator[tuple[ContentNode, int]]:
    """Yield ``(node, position)`` for every descendant of *root*, depth first.

    ``position`` is the tree position immediately before the node's opening
    slot.  The root itself is not yielded; it owns no slot.
    """

    def _walk(node: ContentNode, pos: int) -> Iterator[tuple[ContentNode, int]]:
        yield node, pos
        if node.content is not None and not node.is_atomic:
            inner = pos + 1
            for child in node.content:
                yield from _walk(child, inner)
                inner += node_size(child)

    pos = 0
    for child in root.content or []:
        yield from _walk(child, pos)
        pos += node_size(child)
