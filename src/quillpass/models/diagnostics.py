"""Diagnostic, fix and build result models shared by every pass."""

from __future__ import annotations

import uuid
from enum import StrEnum

from pydantic import BaseModel, Field


def new_id() -> str:
    """Return a fresh unique identifier for a diagnostic or fix."""
    return str(uuid.uuid4())


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank: errors first, then warnings, then info."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class PassKind(StrEnum):
    LOCAL = "local"
    AI = "ai"


class TextRange(BaseModel):
    """A half-open span in tree-position space."""

    start: int = Field(alias="from")
    end: int = Field(alias="to")

    model_config = {"populate_by_name": True}


class DiagnosticSuggestion(BaseModel):
    """A suggested remedy: either a replacement text or a named editor action."""

    label: str
    replacement: str | None = None
    action: str | None = None


class DiagnosticContext(BaseModel):
    """A window of text and the highlighted span inside it.

    ``offset`` and ``length`` are relative to ``text``; both are 0 when the
    highlighted text could not be located.
    """

    text: str
    offset: int = 0
    length: int = 0


class Diagnostic(BaseModel):
    """A single reported issue."""

    id: str = Field(default_factory=new_id)
    pass_id: str = Field(alias="passId")
    severity: Severity
    title: str
    message: str
    document_id: str = Field(alias="documentId")
    range: TextRange | None = None
    suggestions: list[DiagnosticSuggestion] | None = None
    source: str | None = None
    context: DiagnosticContext | None = None

    model_config = {"populate_by_name": True}


class FixPatch(BaseModel):
    document_id: str = Field(alias="documentId")
    range: TextRange
    replacement: str

    model_config = {"populate_by_name": True}


class Fix(BaseModel):
    """A concrete text replacement tied to exactly one diagnostic."""

    id: str = Field(default_factory=new_id)
    diagnostic_id: str = Field(alias="diagnosticId")
    label: str
    patch: FixPatch

    model_config = {"populate_by_name": True}


class PassResult(BaseModel):
    """Output of one pass run."""

    pass_id: str = Field(alias="passId")
    diagnostics: list[Diagnostic] = []
    fixes: list[Fix] = []
    timing: float = 0.0  # milliseconds

    model_config = {"populate_by_name": True}


class BuildResult(BaseModel):
    """Merged, sorted output of one build."""

    success: bool
    diagnostics: list[Diagnostic] = []
    pass_results: list[PassResult] = Field(default=[], alias="passResults")
    total_timing: float = Field(default=0.0, alias="totalTiming")  # milliseconds

    model_config = {"populate_by_name": True}
