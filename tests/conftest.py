"""Shared test fixtures for QuillPass."""

from __future__ import annotations

from typing import Any

import pytest

from quillpass.models.content import ContentNode
from quillpass.models.project import (
    DocumentWithContent,
    FormattingRules,
    Project,
    ProjectDocument,
    ProjectSettings,
)
from quillpass.passes.base import PassContext
from quillpass.settings import Settings
from quillpass.text.flatten import flatten_text

# ---------------------------------------------------------------------------
# Tree builders
# ---------------------------------------------------------------------------


def text(value: str) -> ContentNode:
    return ContentNode(type="text", text=value)


def mention(label: str) -> ContentNode:
    return ContentNode(type="mention", attrs={"id": label.lower(), "label": label})


def hard_break() -> ContentNode:
    return ContentNode(type="hardBreak")


def paragraph(*children: ContentNode | str, **attrs: Any) -> ContentNode:
    return ContentNode(
        type="paragraph",
        attrs=attrs or None,
        content=[text(c) if isinstance(c, str) else c for c in children],
    )


def heading(value: str, level: int = 1) -> ContentNode:
    return ContentNode(type="heading", attrs={"level": level}, content=[text(value)])


def doc(*blocks: ContentNode) -> ContentNode:
    return ContentNode(type="doc", content=list(blocks))


def lines_doc(*lines: str) -> ContentNode:
    """One paragraph per line."""
    return doc(*(paragraph(line) for line in lines))


def make_document(
    doc_id: str, content: ContentNode, title: str | None = None
) -> DocumentWithContent:
    return DocumentWithContent(
        id=doc_id,
        title=title or doc_id.title(),
        content=content,
        plain_text=flatten_text(content),
    )


def make_context(
    *documents: DocumentWithContent, settings: ProjectSettings | None = None
) -> PassContext:
    settings = settings or ProjectSettings()
    project = Project(
        id="proj-1",
        name="Test Project",
        documents=[ProjectDocument(id=d.id, title=d.title) for d in documents],
        settings=settings,
    )
    return PassContext(project=project, documents=tuple(documents), settings=settings)


SAMPLE_BUILD_REQUEST: dict[str, Any] = {
    "project": {
        "id": "proj-1",
        "name": "Thesis",
        "documents": [
            {"id": "folder-1", "title": "Chapters", "type": "folder", "order": 0},
            {"id": "ch-1", "title": "Chapter One", "type": "document", "order": 1},
        ],
        "settings": {
            "citationStyle": "apa",
            "formattingRules": {"headingStyle": "title", "quotationStyle": "curly"},
            "enabledPasses": ["formatting-lint", "citation"],
        },
    },
    "documentContents": {
        "ch-1": {
            "type": "doc",
            "content": [
                {
                    "type": "heading",
                    "attrs": {"level": 1},
                    "content": [{"type": "text", "text": "the great escape"}],
                },
                {
                    "type": "paragraph",
                    "content": [{"type": "text", "text": "As noted (Smith, 2020), it rained."}],
                },
            ],
        }
    },
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        languagetool_url="http://languagetool.test/v2",
        openai_api_key=None,
        openai_base_url="http://llm.test/v1",
    )


@pytest.fixture
def apa_settings() -> ProjectSettings:
    return ProjectSettings(citation_style="apa", enabled_passes=["citation"])


@pytest.fixture
def title_case_settings() -> ProjectSettings:
    return ProjectSettings(
        formatting_rules=FormattingRules(heading_style="title"),
        enabled_passes=["formatting-lint"],
    )
