"""Pydantic domain models for QuillPass."""

from quillpass.models.content import ContentNode
from quillpass.models.diagnostics import (
    BuildResult,
    Diagnostic,
    DiagnosticContext,
    DiagnosticSuggestion,
    Fix,
    FixPatch,
    PassKind,
    PassResult,
    Severity,
    TextRange,
)
from quillpass.models.project import (
    CitationStyle,
    DocumentWithContent,
    FormattingRules,
    HeadingStyle,
    Project,
    ProjectDocument,
    ProjectSettings,
    QuotationStyle,
    SuggestionDocument,
)

__all__ = [
    "BuildResult",
    "CitationStyle",
    "ContentNode",
    "Diagnostic",
    "DiagnosticContext",
    "DiagnosticSuggestion",
    "DocumentWithContent",
    "Fix",
    "FixPatch",
    "FormattingRules",
    "HeadingStyle",
    "PassKind",
    "PassResult",
    "Project",
    "ProjectDocument",
    "ProjectSettings",
    "QuotationStyle",
    "Severity",
    "SuggestionDocument",
    "TextRange",
]
