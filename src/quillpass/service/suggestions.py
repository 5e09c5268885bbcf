"""AI writing suggestions from a Responses-compatible generation endpoint.

Documents are sent in one request with a strict JSON schema for the reply;
each returned suggestion becomes a :class:`Diagnostic` shown alongside the
build diagnostics.  Failures never propagate: they come back as a single
``info`` diagnostic, except a suggestions payload that does not validate,
which is logged and yields no findings.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from quillpass.models.diagnostics import (
    Diagnostic,
    DiagnosticContext,
    DiagnosticSuggestion,
    Severity,
    TextRange,
)
from quillpass.models.project import SuggestionDocument

logger = logging.getLogger("quillpass.suggestions")

PASS_ID = "ai-suggestions"
SOURCE = "AI Suggestions"
DEFAULT_FIX_LABEL = "Apply suggestion"
TRUNCATION_MARKER = "\n\n[Content truncated due to length...]"

_NULLABLE_STRING = ["string", "null"]

SUGGESTIONS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": "Brief title summarizing the suggestion (5-10 words)",
                    },
                    "message": {
                        "type": "string",
                        "description": (
                            "Detailed explanation of the suggestion and why it would "
                            "improve the writing"
                        ),
                    },
                    "severity": {
                        "type": "string",
                        "enum": ["error", "warning", "info"],
                        "description": (
                            "error for critical issues, warning for improvements, "
                            "info for minor suggestions"
                        ),
                    },
                    "documentId": {
                        "type": "string",
                        "description": "The ID of the document this suggestion applies to",
                    },
                    "issueText": {
                        "type": _NULLABLE_STRING,
                        "description": (
                            "The EXACT text from the document that has the issue (copy "
                            "verbatim for highlighting). Null if the suggestion is general."
                        ),
                    },
                    "contextText": {
                        "type": _NULLABLE_STRING,
                        "description": (
                            "A longer surrounding passage (~50-150 chars) containing the "
                            "issueText for context. Must include the issueText verbatim. "
                            "Null if not applicable."
                        ),
                    },
                    "suggestedFix": {
                        "type": _NULLABLE_STRING,
                        "description": (
                            "The suggested replacement text for issueText, or null if no "
                            "specific replacement"
                        ),
                    },
                    "fixLabel": {
                        "type": _NULLABLE_STRING,
                        "description": (
                            'Label for the fix button (e.g. "Replace with..."), or null if '
                            "no fix available"
                        ),
                    },
                },
                "required": [
                    "title",
                    "message",
                    "severity",
                    "documentId",
                    "issueText",
                    "contextText",
                    "suggestedFix",
                    "fixLabel",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["suggestions"],
    "additionalProperties": False,
}

SYSTEM_INSTRUCTIONS = """\
You are an expert writing assistant analyzing documents for a creative writing IDE. \
Your task is to provide constructive suggestions to improve the writing.

For each document provided, analyze:
1. **Grammar & Style**: Check for grammatical errors, awkward phrasing, passive voice overuse, \
repetitive words
2. **Clarity**: Identify unclear or ambiguous passages that could confuse readers
3. **Pacing**: Note sections that feel rushed or drag on too long
4. **Dialogue**: For screenplays/scripts, check dialogue naturalness and character voice \
consistency
5. **Show vs Tell**: Point out opportunities to show rather than tell
6. **Structure**: Identify structural issues like missing transitions or abrupt scene changes

Guidelines:
- Focus on actionable, specific suggestions
- Be constructive, not harsh
- Prioritize important issues over nitpicks
- Limit to 5-10 suggestions total across all documents
- Use 'error' severity sparingly (only for significant issues)
- Use 'warning' for improvements that would notably enhance the writing
- Use 'info' for minor suggestions or style preferences

IMPORTANT for issueText and contextText:
- issueText: Copy the EXACT problematic text from the document VERBATIM \
(character-for-character). This will be highlighted in the UI.
- contextText: Copy a larger surrounding passage (~50-150 chars) that CONTAINS the issueText \
verbatim. The issueText must appear exactly within contextText.
- If you cannot identify specific text, set both to null.
- suggestedFix: If providing a fix, this replaces issueText.

The documents are provided in format:
[Document: <title> (id: <id>)]
<content>
---"""


class SuggestionServiceError(Exception):
    """Raised for non-success responses and malformed response bodies."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class Suggestion(BaseModel):
    """One entry of the structured reply."""

    title: str
    message: str
    severity: Severity
    document_id: str = Field(alias="documentId")
    issue_text: str | None = Field(None, alias="issueText")
    context_text: str | None = Field(None, alias="contextText")
    suggested_fix: str | None = Field(None, alias="suggestedFix")
    fix_label: str | None = Field(None, alias="fixLabel")

    model_config = {"populate_by_name": True}


class SuggestionPayload(BaseModel):
    suggestions: list[Suggestion]


class _ErrorInfo(BaseModel):
    message: str = ""
    type: str | None = None
    code: str | None = None


class _ContentItem(BaseModel):
    type: str
    text: str | None = None


class _OutputItem(BaseModel):
    type: str | None = None
    role: str | None = None
    content: list[_ContentItem] = []


class ResponsesEnvelope(BaseModel):
    """The parts of a Responses API reply the service reads."""

    status: str | None = None
    error: _ErrorInfo | None = None
    output: list[_OutputItem] = []

    def output_text(self) -> str | None:
        """Text of the assistant's reply, or ``None`` if there is none."""
        message = next((o for o in self.output if o.role == "assistant"), None)
        if message is None:
            logger.warning("No assistant message in response")
            return None
        content = next(
            (c for c in message.content if c.type in ("output_text", "text") and c.text), None
        )
        if content is None:
            logger.warning("No text content in response")
            return None
        return content.text


def build_input(documents: Sequence[SuggestionDocument], max_chars: int) -> str:
    """Concatenate documents in the format the instructions describe, truncating long input."""
    text = "\n\n".join(f"[Document: {d.title} (id: {d.id})]\n{d.content}\n---" for d in documents)
    if len(text) > max_chars:
        return text[:max_chars] + TRUNCATION_MARKER
    return text


def locate_in_context(issue_text: str, context_text: str) -> DiagnosticContext:
    """Highlight *issue_text* inside *context_text*: exact, then case-insensitive.

    When neither lookup succeeds the window is kept without a highlight.
    """
    index = context_text.find(issue_text)
    if index == -1:
        index = context_text.lower().find(issue_text.lower())
    if index == -1:
        logger.warning(
            "issueText not found in contextText (issue=%r, context=%r)", issue_text, context_text
        )
        return DiagnosticContext(text=context_text, offset=0, length=0)
    return DiagnosticContext(text=context_text, offset=index, length=len(issue_text))


def suggestion_to_diagnostic(suggestion: Suggestion, documents: dict[str, str]) -> Diagnostic:
    diagnostic = Diagnostic(
        pass_id=PASS_ID,
        severity=suggestion.severity,
        title=suggestion.title,
        message=suggestion.message,
        document_id=suggestion.document_id,
        source=SOURCE,
    )
    issue, context = suggestion.issue_text, suggestion.context_text

    content = documents.get(suggestion.document_id)
    if issue and content:
        index = content.find(issue)
        if index != -1:
            diagnostic.range = TextRange(start=index, end=index + len(issue))

    if issue is not None and context is not None:
        diagnostic.context = locate_in_context(issue, context)
    elif context is not None:
        diagnostic.context = DiagnosticContext(text=context, offset=0, length=0)
    elif issue is not None:
        diagnostic.context = DiagnosticContext(text=issue, offset=0, length=len(issue))

    if suggestion.suggested_fix is not None:
        diagnostic.suggestions = [
            DiagnosticSuggestion(
                label=suggestion.fix_label or DEFAULT_FIX_LABEL,
                replacement=suggestion.suggested_fix,
            )
        ]
    return diagnostic


class SuggestionService:
    """Generates writing suggestions; at most one request in flight.

    The service owns its credential and busy flag; create one per process
    and inject it where needed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4.1",
        max_input_chars: int = 100_000,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or None
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_input_chars = max_input_chars
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._transport = transport
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def generate_suggestions(
        self, documents: Sequence[SuggestionDocument]
    ) -> list[Diagnostic]:
        """Return suggestion diagnostics for *documents*; never raises."""
        if self._in_flight:
            logger.info("Already generating, skipping")
            return []
        if not self._api_key:
            logger.info("No API key configured")
            return []
        if not documents:
            logger.info("No documents to analyze")
            return []

        self._in_flight = True
        logger.info("Generating suggestions for %d document(s)", len(documents))
        try:
            envelope = await self._request(build_input(documents, self.max_input_chars))
            diagnostics = self._parse(envelope, documents)
            logger.info("Generated %d suggestion(s)", len(diagnostics))
            return diagnostics
        except Exception as exc:
            logger.error("Error generating suggestions: %s", exc)
            return [
                Diagnostic(
                    pass_id=PASS_ID,
                    severity=Severity.INFO,
                    title="AI suggestions unavailable",
                    message=str(exc) or "Failed to generate AI suggestions",
                    document_id=documents[0].id or "unknown",
                    source=SOURCE,
                )
            ]
        finally:
            self._in_flight = False

    def request_body(self, input_text: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "input": input_text,
            "instructions": SYSTEM_INSTRUCTIONS,
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "ai_suggestions",
                    "schema": SUGGESTIONS_SCHEMA,
                    "strict": True,
                }
            },
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
        }

    async def _request(self, input_text: str) -> ResponsesEnvelope:
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            resp = await client.post(
                "/responses",
                json=self.request_body(input_text),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )

        if not resp.is_success:
            raise SuggestionServiceError(_error_message(resp), status_code=resp.status_code)

        try:
            envelope = ResponsesEnvelope.model_validate_json(resp.content)
        except ValidationError as exc:
            raise SuggestionServiceError(
                f"Malformed response from generation service: {exc}"
            ) from exc

        if envelope.status == "failed" and envelope.error is not None:
            raise SuggestionServiceError(envelope.error.message or "AI response generation failed")
        return envelope

    def _parse(
        self, envelope: ResponsesEnvelope, documents: Sequence[SuggestionDocument]
    ) -> list[Diagnostic]:
        text = envelope.output_text()
        if text is None:
            return []
        try:
            payload = SuggestionPayload.model_validate_json(text)
        except ValidationError as exc:
            logger.error("Failed to parse suggestions payload: %s", exc)
            return []

        contents = {d.id: d.content for d in documents}
        return [suggestion_to_diagnostic(s, contents) for s in payload.suggestions]


def _error_message(resp: httpx.Response) -> str:
    fallback = f"API request failed with status {resp.status_code}"
    try:
        data = resp.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"].get("message") or fallback
    return fallback
