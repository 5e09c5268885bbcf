"""Map plain-text offsets from :func:`~quillpass.text.flatten.flatten` back to tree positions."""

from __future__ import annotations

from collections.abc import Sequence

from quillpass.models.diagnostics import TextRange
from quillpass.text.flatten import PositionMapEntry


def resolve_offset(offset: int, positions: Sequence[PositionMapEntry]) -> int:
    """Return the tree position for plain-text *offset*.

    Atomic entries write ``atomic_span`` characters but occupy one tree
    slot, so every atomic node ending at or before *offset* shifts the
    result back by ``atomic_span - 1``.  An offset landing on an atomic
    label (its first character included) maps to the node itself.  Never
    raises; unmapped offsets fall back to the adjusted offset.
    """
    adjustment = 0
    for entry in positions:
        if entry.atomic_span is None:
            continue
        end = entry.text_offset + entry.atomic_span
        if offset >= end:
            adjustment += entry.atomic_span - 1
        elif entry.text_offset <= offset:
            return entry.tree_position

    for entry in reversed(positions):
        if entry.atomic_span is not None or entry.text_offset > offset:
            continue
        return entry.tree_position + max(0, offset - entry.text_offset - adjustment)

    return max(0, offset - adjustment)


def resolve_range(start: int, end: int, positions: Sequence[PositionMapEntry]) -> TextRange:
    """Resolve a plain-text span ``[start, end)`` to a tree range."""
    tree_start = resolve_offset(start, positions)
    tree_end = max(tree_start, resolve_offset(end, positions))
    return TextRange(start=tree_start, end=tree_end)
