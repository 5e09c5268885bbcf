"""Content tree nodes as produced by the rich-text editor."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

# Block nodes whose close inserts a line break into flattened text.
BLOCK_NODE_TYPES: frozenset[str] = frozenset(
    {"paragraph", "heading", "blockquote", "codeBlock", "listItem", "screenplayElement"}
)

# Inline nodes that occupy a single tree slot but render a label.
ATOMIC_NODE_TYPES: frozenset[str] = frozenset({"mention"})


class ContentNode(BaseModel):
    """A typed node of a document tree.

    ``content`` is present on container nodes (even when empty) and absent
    on leaves; ``text`` is only meaningful for ``text`` leaves.
    """

    type: str
    text: str | None = None
    attrs: dict[str, Any] | None = None
    content: list[ContentNode] | None = None
    marks: list[dict[str, Any]] | None = None

    @property
    def is_container(self) -> bool:
        return self.content is not None

    @property
    def is_atomic(self) -> bool:
        return self.type in ATOMIC_NODE_TYPES

    def attr(self, name: str, default: Any = None) -> Any:
        if not self.attrs:
            return default
        return self.attrs.get(name, default)

    @property
    def label(self) -> str:
        """Rendered label of an atomic inline node."""
        return self.attr("label") or self.attr("id") or "mention"

    @classmethod
    def empty_document(cls) -> ContentNode:
        return cls(type="doc", content=[])
