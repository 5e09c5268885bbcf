"""Content tree ⇄ plain text position mapping."""

from quillpass.text.flatten import FlattenResult, PositionMapEntry, flatten
from quillpass.text.resolve import resolve_offset, resolve_range

__all__ = [
    "FlattenResult",
    "PositionMapEntry",
    "flatten",
    "resolve_offset",
    "resolve_range",
]
