"""Project, document and settings models consumed by a build."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from quillpass.models.content import ContentNode


class CitationStyle(StrEnum):
    APA = "apa"
    MLA = "mla"
    CHICAGO = "chicago"
    NONE = "none"


class HeadingStyle(StrEnum):
    TITLE = "title"
    SENTENCE = "sentence"
    NONE = "none"


class QuotationStyle(StrEnum):
    CURLY = "curly"
    STRAIGHT = "straight"


class DocumentType(StrEnum):
    DOCUMENT = "document"
    FOLDER = "folder"


class FormattingRules(BaseModel):
    heading_style: HeadingStyle = Field(HeadingStyle.NONE, alias="headingStyle")
    quotation_style: QuotationStyle = Field(QuotationStyle.CURLY, alias="quotationStyle")
    enforce_double_spacing: bool = Field(False, alias="enforceDoubleSpacing")

    model_config = {"populate_by_name": True}


class ProjectSettings(BaseModel):
    """Per-project analysis settings.

    ``enabled_passes`` is ordered: it is the run order of the build.
    """

    citation_style: CitationStyle = Field(CitationStyle.NONE, alias="citationStyle")
    formatting_rules: FormattingRules = Field(
        default_factory=FormattingRules, alias="formattingRules"
    )
    enabled_passes: list[str] = Field(default=[], alias="enabledPasses")

    model_config = {"populate_by_name": True}


class ProjectDocument(BaseModel):
    """An entry of the project tree (a document or a folder)."""

    id: str
    title: str
    type: DocumentType = DocumentType.DOCUMENT
    order: int = 0
    path: str | None = None
    parent_id: str | None = Field(None, alias="parentId")

    model_config = {"populate_by_name": True}


class Project(BaseModel):
    id: str
    name: str
    documents: list[ProjectDocument] = []
    settings: ProjectSettings = Field(default_factory=ProjectSettings)


class DocumentWithContent(BaseModel):
    """A document ready for analysis: its tree and its flattened text."""

    id: str
    title: str
    content: ContentNode
    plain_text: str = Field("", alias="plainText")

    model_config = {"populate_by_name": True, "frozen": True}


class SuggestionDocument(BaseModel):
    """A document as sent to the suggestion service: raw serialized text."""

    id: str
    title: str
    content: str
