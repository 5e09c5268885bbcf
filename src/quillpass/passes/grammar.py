"""Spelling and grammar checking through an external LanguageTool server."""

from __future__ import annotations

import logging
import time

from quillpass.models.diagnostics import (
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
from quillpass.models.project import DocumentWithContent
from quillpass.passes.base import Pass, PassContext
from quillpass.service.languagetool import GrammarMatch, LanguageToolClient
from quillpass.text.flatten import flatten
from quillpass.text.resolve import resolve_offset

logger = logging.getLogger("quillpass.grammar")

ERROR_CATEGORIES = frozenset({"TYPOS", "GRAMMAR"})
WARNING_CATEGORIES = frozenset({"PUNCTUATION", "TYPOGRAPHY", "CASING"})
MAX_SUGGESTIONS = 5


def map_severity(category_id: str) -> Severity:
    if category_id in ERROR_CATEGORIES:
        return Severity.ERROR
    if category_id in WARNING_CATEGORIES:
        return Severity.WARNING
    return Severity.INFO


class GrammarPass(Pass):
    """Runs each document through LanguageTool and maps matches onto the tree."""

    def __init__(self, client: LanguageToolClient | None = None) -> None:
        self._client = client or LanguageToolClient()

    @property
    def id(self) -> str:
        return "spelling-grammar"

    @property
    def name(self) -> str:
        return "Spelling & Grammar"

    @property
    def kind(self) -> PassKind:
        return PassKind.LOCAL

    async def run(self, ctx: PassContext) -> PassResult:
        started = time.monotonic()
        diagnostics: list[Diagnostic] = []
        fixes: list[Fix] = []

        if not await self._client.is_available():
            diagnostics.append(
                Diagnostic(
                    pass_id=self.id,
                    severity=Severity.INFO,
                    title="Spelling Check Unavailable",
                    message=(
                        f"LanguageTool server is not running at {self._client.base_url}. "
                        "Start it with: docker run -d -p 8010:8010 erikvl87/languagetool"
                    ),
                    document_id="",
                )
            )
            return self._result(started, diagnostics)

        for doc in ctx.documents:
            try:
                await self._check_document(doc, diagnostics, fixes)
            except Exception as exc:
                logger.error("Error processing document %s: %s", doc.id, exc)
                reason = str(exc) or "Unknown error"
                diagnostics.append(
                    Diagnostic(
                        pass_id=self.id,
                        severity=Severity.WARNING,
                        title="Spelling Check Error",
                        message=f'Failed to check document "{doc.title}": {reason}',
                        document_id=doc.id,
                    )
                )

        return self._result(started, diagnostics, fixes)

    async def _check_document(
        self, doc: DocumentWithContent, diagnostics: list[Diagnostic], fixes: list[Fix]
    ) -> None:
        flat = flatten(doc.content)
        if not flat.text.strip():
            return

        matches = await self._client.check(flat.text)
        logger.debug("Document %s: %d grammar match(es)", doc.id, len(matches))

        for match in matches:
            start = resolve_offset(match.offset, flat.positions)
            end = max(start, resolve_offset(match.offset + match.length, flat.positions))
            text_range = TextRange(start=start, end=end)
            diagnostic = self._to_diagnostic(match, doc.id, text_range)
            diagnostics.append(diagnostic)

            if match.replacements:
                first = match.replacements[0].value
                fixes.append(
                    Fix(
                        diagnostic_id=diagnostic.id,
                        label=f'Replace with "{first}"',
                        patch=FixPatch(
                            document_id=doc.id, range=text_range, replacement=first
                        ),
                    )
                )

    def _to_diagnostic(
        self, match: GrammarMatch, document_id: str, text_range: TextRange
    ) -> Diagnostic:
        return Diagnostic(
            pass_id=self.id,
            severity=map_severity(match.rule.category.id),
            title=match.rule.category.name,
            message=match.message,
            document_id=document_id,
            range=text_range,
            suggestions=[
                DiagnosticSuggestion(label=f'Replace with "{r.value}"', replacement=r.value)
                for r in match.replacements[:MAX_SUGGESTIONS]
            ],
            source=f"{match.rule.id}: {match.rule.description}",
            context=DiagnosticContext(
                text=match.context.text,
                offset=match.context.offset,
                length=match.context.length,
            ),
        )
