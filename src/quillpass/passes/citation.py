"""Citation validation: inline citations vs. the references section (APA / MLA)."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass

from quillpass.models.content import ContentNode
from quillpass.models.diagnostics import (
    Diagnostic,
    DiagnosticSuggestion,
    Fix,
    FixPatch,
    PassKind,
    PassResult,
    Severity,
)
from quillpass.models.project import CitationStyle
from quillpass.passes.base import Pass, PassContext
from quillpass.text.flatten import PositionMapEntry, flatten
from quillpass.text.resolve import resolve_range

_AUTHORS_APA = r"[A-Z][a-zA-Z]+(?:\s*(?:&|and)\s*[A-Z][a-zA-Z]+)*(?:\s+et\s+al\.)?"
_AUTHORS_MLA = r"[A-Z][a-zA-Z]+(?:\s*(?:and)\s*[A-Z][a-zA-Z]+)*"

# APA: (Author, Year), (Author, Year, p. 12) or Author (Year)
APA_INLINE_PATTERN = re.compile(
    rf"\(({_AUTHORS_APA}),?\s*(\d{{4}})(?:,?\s*pp?\.\s*\d+(?:-\d+)?)?\)"
)
APA_NARRATIVE_PATTERN = re.compile(rf"({_AUTHORS_APA})\s*\((\d{{4}})\)")

# MLA: (Author Page) or (Author)
MLA_INLINE_PATTERN = re.compile(rf"\(({_AUTHORS_MLA})\s+(\d+(?:-\d+)?)\)")
MLA_AUTHOR_ONLY_PATTERN = re.compile(rf"\(({_AUTHORS_MLA})\)")

# APA: Author, A. B. (Year). Title. Publisher.
APA_REFERENCE_PATTERN = re.compile(r"^([A-Z][a-zA-Z]+),\s*[A-Z]\.\s*(?:[A-Z]\.\s*)?\((\d{4})\)\.")
# MLA: Author, First. Title. Publisher, Year.
MLA_REFERENCE_PATTERN = re.compile(
    r"^([A-Z][a-zA-Z]+),\s*[A-Za-z]+\.\s*.+\.\s*[A-Za-z\s]+,?\s*(\d{4})\."
)

REFERENCES_HEADING_PATTERN = re.compile(r"^(References|Works Cited|Bibliography)$", re.IGNORECASE)

APA_MISSING_COMMA_PATTERN = re.compile(r"\(([A-Z][a-zA-Z]+)\s+(\d{4})\)")
YEAR_ONLY_PATTERN = re.compile(r"\((\d{4})\)")


@dataclass
class CitationMatch:
    author: str
    position: int
    length: int
    raw: str
    year: str | None = None
    page: str | None = None


@dataclass
class ReferenceEntry:
    author: str
    year: str
    position: int
    raw: str


@dataclass
class _ScannedDocument:
    document_id: str
    text: str
    positions: list[PositionMapEntry]
    citations: list[CitationMatch]
    references: list[ReferenceEntry]


def parse_apa_citations(text: str) -> list[CitationMatch]:
    citations: list[CitationMatch] = []
    for m in APA_INLINE_PATTERN.finditer(text):
        citations.append(
            CitationMatch(
                author=m.group(1).strip(),
                year=m.group(2),
                position=m.start(),
                length=len(m.group(0)),
                raw=m.group(0),
            )
        )

    for m in APA_NARRATIVE_PATTERN.finditer(text):
        author = m.group(1).strip()
        duplicate = any(
            c.position == m.start() or (c.author == author and c.year == m.group(2))
            for c in citations
        )
        if not duplicate:
            citations.append(
                CitationMatch(
                    author=author,
                    year=m.group(2),
                    position=m.start(),
                    length=len(m.group(0)),
                    raw=m.group(0),
                )
            )
    return citations


def parse_mla_citations(text: str) -> list[CitationMatch]:
    citations: list[CitationMatch] = []
    for m in MLA_INLINE_PATTERN.finditer(text):
        citations.append(
            CitationMatch(
                author=m.group(1).strip(),
                page=m.group(2),
                position=m.start(),
                length=len(m.group(0)),
                raw=m.group(0),
            )
        )

    for m in MLA_AUTHOR_ONLY_PATTERN.finditer(text):
        if any(c.position == m.start() for c in citations):
            continue
        citations.append(
            CitationMatch(
                author=m.group(1).strip(),
                position=m.start(),
                length=len(m.group(0)),
                raw=m.group(0),
            )
        )
    return citations


def parse_references(text: str, style: CitationStyle) -> list[ReferenceEntry]:
    """Collect bibliography entries found below a references heading."""
    pattern = APA_REFERENCE_PATTERN if style == CitationStyle.APA else MLA_REFERENCE_PATTERN
    references: list[ReferenceEntry] = []
    in_references = False
    line_start = 0

    for line in text.split("\n"):
        stripped = line.strip()
        if REFERENCES_HEADING_PATTERN.match(stripped):
            in_references = True
        elif in_references and stripped:
            m = pattern.match(stripped)
            if m:
                references.append(
                    ReferenceEntry(
                        author=m.group(1).strip(),
                        year=m.group(2),
                        position=line_start + (len(line) - len(line.lstrip())),
                        raw=stripped,
                    )
                )
        line_start += len(line) + 1

    return references


def normalize_author(author: str) -> str:
    normalized = author.lower()
    normalized = re.sub(r"\s*et\s+al\.?\s*", "", normalized)
    normalized = re.sub(r"\s*&\s*", " and ", normalized)
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized.strip()


def authors_match(a: str, b: str) -> bool:
    """Containment either way, so ``Smith`` matches ``Smith & Jones``."""
    na, nb = normalize_author(a), normalize_author(b)
    return na in nb or nb in na


def _cites(citation: CitationMatch, reference: ReferenceEntry, style: CitationStyle) -> bool:
    if not authors_match(citation.author, reference.author):
        return False
    if style == CitationStyle.APA:
        return citation.year == reference.year
    return True


class CitationPass(Pass):
    """Cross-checks inline citations against the references section."""

    @property
    def id(self) -> str:
        return "citation"

    @property
    def name(self) -> str:
        return "Citation Validator"

    @property
    def kind(self) -> PassKind:
        return PassKind.LOCAL

    async def run(self, ctx: PassContext) -> PassResult:
        started = time.monotonic()
        style = ctx.settings.citation_style
        if style == CitationStyle.NONE:
            return self._result(started, [])

        diagnostics: list[Diagnostic] = []
        fixes: list[Fix] = []
        scanned = [self._scan(doc.id, doc.content, style) for doc in ctx.documents]

        all_citations = [(doc, c) for doc in scanned for c in doc.citations]
        all_references = [(doc, r) for doc in scanned for r in doc.references]

        for doc, citation in all_citations:
            if any(_cites(citation, ref, style) for _, ref in all_references):
                continue
            if style == CitationStyle.APA:
                message = (
                    f'No reference found for citation "{citation.author}, {citation.year}". '
                    "Add this source to your References section."
                )
            else:
                message = (
                    f'No reference found for citation "{citation.author}". '
                    "Add this source to your Works Cited."
                )
            diagnostics.append(
                Diagnostic(
                    pass_id=self.id,
                    severity=Severity.WARNING,
                    title="Missing Reference",
                    message=message,
                    document_id=doc.document_id,
                    range=resolve_range(
                        citation.position, citation.position + citation.length, doc.positions
                    ),
                    suggestions=[
                        DiagnosticSuggestion(label="Add to references", action="add-reference")
                    ],
                )
            )

        for doc, ref in all_references:
            if any(_cites(citation, ref, style) for _, citation in all_citations):
                continue
            diagnostics.append(
                Diagnostic(
                    pass_id=self.id,
                    severity=Severity.INFO,
                    title="Uncited Reference",
                    message=(
                        f'Reference "{ref.author}" is not cited in the document. '
                        "Consider removing or citing this source."
                    ),
                    document_id=doc.document_id,
                    range=resolve_range(ref.position, ref.position + len(ref.raw), doc.positions),
                )
            )

        for doc in scanned:
            if style == CitationStyle.APA:
                self._check_missing_commas(doc, diagnostics, fixes)
            self._check_year_only(doc, diagnostics)

        return self._result(started, diagnostics, fixes)

    def _scan(
        self, document_id: str, content: ContentNode, style: CitationStyle
    ) -> _ScannedDocument:
        flat = flatten(content)
        if style == CitationStyle.APA:
            citations = parse_apa_citations(flat.text)
        else:
            citations = parse_mla_citations(flat.text)
        return _ScannedDocument(
            document_id=document_id,
            text=flat.text,
            positions=flat.positions,
            citations=citations,
            references=parse_references(flat.text, style),
        )

    def _check_missing_commas(
        self, doc: _ScannedDocument, diagnostics: list[Diagnostic], fixes: list[Fix]
    ) -> None:
        """Flag ``(Author Year)`` forms unless a well-formed citation starts there."""
        for m in APA_MISSING_COMMA_PATTERN.finditer(doc.text):
            well_formed = any(
                c.position == m.start() and "," in c.raw for c in doc.citations
            )
            if well_formed:
                continue
            replacement = f"({m.group(1)}, {m.group(2)})"
            text_range = resolve_range(m.start(), m.end(), doc.positions)
            diagnostic = Diagnostic(
                pass_id=self.id,
                severity=Severity.WARNING,
                title="Citation Format Error",
                message="APA citations require a comma between author and year: (Author, Year)",
                document_id=doc.document_id,
                range=text_range,
                suggestions=[DiagnosticSuggestion(label="Add comma", replacement=replacement)],
            )
            diagnostics.append(diagnostic)
            fixes.append(
                Fix(
                    diagnostic_id=diagnostic.id,
                    label="Add comma",
                    patch=FixPatch(
                        document_id=doc.document_id, range=text_range, replacement=replacement
                    ),
                )
            )

    def _check_year_only(self, doc: _ScannedDocument, diagnostics: list[Diagnostic]) -> None:
        """Flag every bare ``(Year)``."""
        for m in YEAR_ONLY_PATTERN.finditer(doc.text):
            diagnostics.append(
                Diagnostic(
                    pass_id=self.id,
                    severity=Severity.INFO,
                    title="Possible Incomplete Citation",
                    message=(
                        "Year-only citation found. Did you mean to include an author? "
                        f"Example: (Author, {m.group(1)})"
                    ),
                    document_id=doc.document_id,
                    range=resolve_range(m.start(), m.end(), doc.positions),
                )
            )
