"""Formatting lint: heading case, quotation marks, whitespace and line spacing."""

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
    TextRange,
)
from quillpass.models.project import DocumentWithContent, HeadingStyle, QuotationStyle
from quillpass.passes.base import Pass, PassContext
from quillpass.text.flatten import flatten
from quillpass.text.resolve import resolve_range
from quillpass.text.tree import content_size, iter_positioned, node_text

MINOR_WORDS: frozenset[str] = frozenset(
    {"a", "an", "the", "and", "but", "or", "for", "nor", "on", "at", "to", "by", "of", "in"}
)

STRAIGHT_QUOTES: frozenset[str] = frozenset({'"', "'"})
CURLY_QUOTES: frozenset[str] = frozenset({"\u201c", "\u201d", "\u2018", "\u2019"})

_WHITESPACE_RULES: tuple[tuple[str, re.Pattern[str], str, str], ...] = (
    (
        "multiple-spaces",
        re.compile(r"  +"),
        "Multiple Consecutive Spaces",
        "Replace multiple spaces with a single space",
    ),
    (
        "excessive-blank-lines",
        re.compile(r"\n{3,}"),
        "Excessive Blank Lines",
        "Reduce to maximum of one blank line",
    ),
    (
        "trailing-whitespace",
        re.compile(r"[ \t]+(?=\n)"),
        "Trailing Whitespace",
        "Remove trailing whitespace at end of line",
    ),
)

DOUBLE_LINE_HEIGHT = ("2", 2, 2.0)


def _words(text: str) -> list[str]:
    return re.split(r"\s+", text)


def is_title_case(text: str) -> bool:
    words = _words(text)
    last = len(words) - 1
    for index, word in enumerate(words):
        if not word:
            continue
        if word.lower() in MINOR_WORDS and index not in (0, last):
            if word != word.lower():
                return False
        elif word[0] != word[0].upper():
            return False
    return True


def is_sentence_case(text: str) -> bool:
    if not text:
        return True
    return text[0] == text[0].upper()


def to_title_case(text: str) -> str:
    words = _words(text)
    last = len(words) - 1
    converted: list[str] = []
    for index, word in enumerate(words):
        if not word:
            converted.append(word)
        elif word.lower() in MINOR_WORDS and index not in (0, last):
            converted.append(word.lower())
        else:
            converted.append(word[0].upper() + word[1:].lower())
    return " ".join(converted)


def to_sentence_case(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


@dataclass
class HeadingInfo:
    level: int
    text: str
    position: int  # tree position before the heading's opening slot
    inner_size: int


def extract_headings(content: ContentNode) -> list[HeadingInfo]:
    headings: list[HeadingInfo] = []
    for node, pos in iter_positioned(content):
        if node.type != "heading":
            continue
        headings.append(
            HeadingInfo(
                level=int(node.attr("level", 1) or 1),
                text=node_text(node),
                position=pos,
                inner_size=content_size(node),
            )
        )
    return headings


def count_quotes(text: str, prefer: QuotationStyle) -> int:
    """Count quotation marks from the family opposite to *prefer*."""
    offending = STRAIGHT_QUOTES if prefer == QuotationStyle.CURLY else CURLY_QUOTES
    return sum(1 for ch in text if ch in offending)


def _has_double_line_height(node: ContentNode) -> bool:
    return node.attr("lineHeight") in DOUBLE_LINE_HEIGHT


class FormattingPass(Pass):
    """Checks documents against the project's formatting rules."""

    @property
    def id(self) -> str:
        return "formatting-lint"

    @property
    def name(self) -> str:
        return "Formatting Lint"

    @property
    def kind(self) -> PassKind:
        return PassKind.LOCAL

    async def run(self, ctx: PassContext) -> PassResult:
        started = time.monotonic()
        rules = ctx.settings.formatting_rules
        diagnostics: list[Diagnostic] = []
        fixes: list[Fix] = []

        for doc in ctx.documents:
            if rules.heading_style != HeadingStyle.NONE:
                self._check_headings(doc, rules.heading_style, diagnostics, fixes)

            flat = flatten(doc.content)

            quote_count = count_quotes(flat.text, rules.quotation_style)
            if quote_count:
                expected = (
                    "curly quotes"
                    if rules.quotation_style == QuotationStyle.CURLY
                    else "straight quotes"
                )
                diagnostics.append(
                    Diagnostic(
                        pass_id=self.id,
                        severity=Severity.INFO,
                        title="Inconsistent Quotation Marks",
                        message=(
                            f"Document contains {quote_count} quotation mark(s) "
                            f"that should be {expected}"
                        ),
                        document_id=doc.id,
                        suggestions=[
                            DiagnosticSuggestion(
                                label=f"Convert all to {expected}", action="convert-quotes"
                            )
                        ],
                    )
                )

            for _, pattern, title, message in _WHITESPACE_RULES:
                for m in pattern.finditer(flat.text):
                    diagnostics.append(
                        Diagnostic(
                            pass_id=self.id,
                            severity=Severity.INFO,
                            title=title,
                            message=message,
                            document_id=doc.id,
                            range=resolve_range(m.start(), m.end(), flat.positions),
                            suggestions=[
                                DiagnosticSuggestion(
                                    label="Fix whitespace", action="fix-whitespace"
                                )
                            ],
                        )
                    )

            if rules.enforce_double_spacing:
                self._check_double_spacing(doc, flat.text, diagnostics)

        return self._result(started, diagnostics, fixes)

    def _check_headings(
        self,
        doc: DocumentWithContent,
        style: HeadingStyle,
        diagnostics: list[Diagnostic],
        fixes: list[Fix],
    ) -> None:
        title_style = style == HeadingStyle.TITLE
        expected = "title case" if title_style else "sentence case"

        for heading in extract_headings(doc.content):
            if not heading.text.strip():
                continue
            correct = is_title_case(heading.text) if title_style else is_sentence_case(heading.text)
            if correct:
                continue

            fixed = to_title_case(heading.text) if title_style else to_sentence_case(heading.text)
            inner_start = heading.position + 1
            text_range = TextRange(start=inner_start, end=inner_start + heading.inner_size)
            label = f"Convert to {expected}"
            diagnostic = Diagnostic(
                pass_id=self.id,
                severity=Severity.WARNING,
                title="Inconsistent Heading Style",
                message=f'Heading "{heading.text}" should be in {expected}',
                document_id=doc.id,
                range=text_range,
                suggestions=[DiagnosticSuggestion(label=label, replacement=fixed)],
            )
            diagnostics.append(diagnostic)
            fixes.append(
                Fix(
                    diagnostic_id=diagnostic.id,
                    label=label,
                    patch=FixPatch(document_id=doc.id, range=text_range, replacement=fixed),
                )
            )

    def _check_double_spacing(
        self, doc: DocumentWithContent, text: str, diagnostics: list[Diagnostic]
    ) -> None:
        paragraphs = [p for p in re.split(r"\n+", text) if p]
        if len(paragraphs) <= 1:
            return
        top_level = [n for n in doc.content.content or [] if n.type == "paragraph"]
        if all(_has_double_line_height(n) for n in top_level):
            return
        diagnostics.append(
            Diagnostic(
                pass_id=self.id,
                severity=Severity.WARNING,
                title="Double Spacing Required",
                message=(
                    "This document requires double line spacing. "
                    "Some paragraphs may not have proper spacing."
                ),
                document_id=doc.id,
                suggestions=[
                    DiagnosticSuggestion(
                        label="Apply double spacing", action="apply-double-spacing"
                    )
                ],
            )
        )

