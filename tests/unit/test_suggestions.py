"""Tests for the AI suggestion service."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from quillpass.models.diagnostics import Severity
from quillpass.models.project import SuggestionDocument
from quillpass.service.suggestions import (
    DEFAULT_FIX_LABEL,
    TRUNCATION_MARKER,
    Suggestion,
    SuggestionService,
    build_input,
    locate_in_context,
    suggestion_to_diagnostic,
)

BASE_URL = "http://llm.test/v1"

STORY = SuggestionDocument(
    id="ch-1",
    title="Chapter One",
    content="The cat sat on the mat. It was very very happy.",
)


def _suggestion(**overrides: Any) -> dict[str, Any]:
    data = {
        "title": "Repeated word",
        "message": "The word 'very' is repeated.",
        "severity": "warning",
        "documentId": "ch-1",
        "issueText": "very very",
        "contextText": "It was very very happy.",
        "suggestedFix": "very",
        "fixLabel": None,
    }
    data.update(overrides)
    return data


def _envelope(payload: str, **overrides: Any) -> dict[str, Any]:
    data = {
        "id": "resp_1",
        "status": "completed",
        "error": None,
        "output": [
            {
                "type": "message",
                "role": "assistant",
                "content": [{"type": "output_text", "text": payload}],
            }
        ],
    }
    data.update(overrides)
    return data


def _respond(*suggestions: dict[str, Any]) -> httpx.MockTransport:
    body = _envelope(json.dumps({"suggestions": list(suggestions)}))
    return httpx.MockTransport(lambda request: httpx.Response(200, json=body))


def _service(transport: httpx.AsyncBaseTransport, **kwargs: Any) -> SuggestionService:
    kwargs.setdefault("api_key", "sk-test")
    return SuggestionService(base_url=BASE_URL, transport=transport, **kwargs)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("no request expected")


class TestBuildInput:
    def test_format(self) -> None:
        text = build_input([STORY], max_chars=10_000)
        assert text == f"[Document: Chapter One (id: ch-1)]\n{STORY.content}\n---"

    def test_documents_joined(self) -> None:
        other = SuggestionDocument(id="ch-2", title="Two", content="More.")
        text = build_input([STORY, other], max_chars=10_000)
        assert "---\n\n[Document: Two (id: ch-2)]" in text

    def test_truncation(self) -> None:
        text = build_input([STORY], max_chars=20)
        assert text.endswith(TRUNCATION_MARKER)
        assert len(text) == 20 + len(TRUNCATION_MARKER)


class TestLocateInContext:
    def test_exact(self) -> None:
        ctx = locate_in_context("very very", "It was very very happy.")
        assert (ctx.offset, ctx.length) == (7, 9)

    def test_case_insensitive(self) -> None:
        ctx = locate_in_context("VERY very", "It was very very happy.")
        assert (ctx.offset, ctx.length) == (7, 9)

    def test_not_found_keeps_window(self) -> None:
        ctx = locate_in_context("purple", "It was very very happy.")
        assert ctx.text == "It was very very happy."
        assert (ctx.offset, ctx.length) == (0, 0)


class TestSuggestionToDiagnostic:
    def test_full_suggestion(self) -> None:
        suggestion = Suggestion.model_validate(_suggestion())
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})

        assert diagnostic.pass_id == "ai-suggestions"
        assert diagnostic.source == "AI Suggestions"
        assert diagnostic.severity == Severity.WARNING
        start = STORY.content.index("very very")
        assert (diagnostic.range.start, diagnostic.range.end) == (start, start + 9)
        assert (diagnostic.context.offset, diagnostic.context.length) == (7, 9)
        [fix] = diagnostic.suggestions
        assert fix.label == DEFAULT_FIX_LABEL
        assert fix.replacement == "very"

    def test_custom_fix_label(self) -> None:
        suggestion = Suggestion.model_validate(_suggestion(fixLabel="Remove repetition"))
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})
        assert diagnostic.suggestions[0].label == "Remove repetition"

    def test_issue_not_in_document(self) -> None:
        suggestion = Suggestion.model_validate(
            _suggestion(issueText="purple", contextText="A purple sky.")
        )
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})
        assert diagnostic.range is None
        assert (diagnostic.context.offset, diagnostic.context.length) == (2, 6)

    def test_only_context(self) -> None:
        suggestion = Suggestion.model_validate(_suggestion(issueText=None))
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})
        assert diagnostic.range is None
        assert diagnostic.context.text == "It was very very happy."
        assert (diagnostic.context.offset, diagnostic.context.length) == (0, 0)

    def test_only_issue(self) -> None:
        suggestion = Suggestion.model_validate(_suggestion(contextText=None))
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})
        assert diagnostic.context.text == "very very"
        assert (diagnostic.context.offset, diagnostic.context.length) == (0, 9)

    def test_general_suggestion(self) -> None:
        suggestion = Suggestion.model_validate(
            _suggestion(issueText=None, contextText=None, suggestedFix=None, severity="info")
        )
        diagnostic = suggestion_to_diagnostic(suggestion, {STORY.id: STORY.content})
        assert diagnostic.range is None
        assert diagnostic.context is None
        assert diagnostic.suggestions is None


class TestGenerateSuggestions:
    async def test_success(self) -> None:
        service = _service(_respond(_suggestion(), _suggestion(title="Tell", severity="info")))
        diagnostics = await service.generate_suggestions([STORY])
        assert [d.title for d in diagnostics] == ["Repeated word", "Tell"]
        assert all(d.document_id == "ch-1" for d in diagnostics)

    async def test_request_shape(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json=_envelope(json.dumps({"suggestions": []})))

        service = _service(httpx.MockTransport(handler), model="gpt-test")
        assert await service.generate_suggestions([STORY]) == []

        [request] = captured
        assert request.url.path == "/v1/responses"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-test"
        assert body["input"].startswith("[Document: Chapter One (id: ch-1)]")
        assert "Show vs Tell" in body["instructions"]
        assert body["text"]["format"]["type"] == "json_schema"
        assert body["text"]["format"]["strict"] is True
        assert body["text"]["format"]["schema"]["required"] == ["suggestions"]

    async def test_no_api_key(self) -> None:
        service = _service(httpx.MockTransport(_unreachable), api_key=None)
        assert service.has_api_key() is False
        assert await service.generate_suggestions([STORY]) == []

    async def test_no_documents(self) -> None:
        service = _service(httpx.MockTransport(_unreachable))
        assert await service.generate_suggestions([]) == []

    async def test_non_json_body(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"<html>Bad gateway</html>")
        )
        diagnostics = await _service(transport).generate_suggestions([STORY])

        [diagnostic] = diagnostics
        assert diagnostic.title == "AI suggestions unavailable"
        assert diagnostic.severity == Severity.INFO
        assert diagnostic.document_id == "ch-1"

    async def test_malformed_suggestions_payload(self) -> None:
        body = _envelope("not json at all")
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        service = _service(transport)
        assert await service.generate_suggestions([STORY]) == []
        assert service.in_flight is False

    async def test_payload_failing_schema_yields_no_findings(self) -> None:
        body = _envelope(json.dumps({"suggestions": [{"title": "No message"}]}))
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        assert await _service(transport).generate_suggestions([STORY]) == []

    async def test_error_envelope(self) -> None:
        body = {"error": {"message": "Incorrect API key provided", "type": "invalid_request"}}
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json=body))
        [diagnostic] = await _service(transport).generate_suggestions([STORY])
        assert diagnostic.title == "AI suggestions unavailable"
        assert diagnostic.message == "Incorrect API key provided"

    async def test_failed_status(self) -> None:
        body = _envelope("", status="failed", error={"message": "Model overloaded"}, output=[])
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        [diagnostic] = await _service(transport).generate_suggestions([STORY])
        assert diagnostic.message == "Model overloaded"

    async def test_no_assistant_message(self) -> None:
        body = _envelope("", output=[{"type": "reasoning", "content": []}])
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        assert await _service(transport).generate_suggestions([STORY]) == []

    async def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = _service(httpx.MockTransport(handler))
        [diagnostic] = await service.generate_suggestions([STORY])
        assert diagnostic.severity == Severity.INFO
        assert service.in_flight is False


class TestConcurrency:
    async def test_second_call_while_in_flight_returns_empty(self) -> None:
        release = asyncio.Event()
        body = _envelope(json.dumps({"suggestions": [_suggestion()]}))

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json=body)

        service = _service(httpx.MockTransport(handler))
        first = asyncio.create_task(service.generate_suggestions([STORY]))
        while not service.in_flight:
            await asyncio.sleep(0)

        assert await service.generate_suggestions([STORY]) == []

        release.set()
        diagnostics = await first
        assert len(diagnostics) == 1
        assert service.in_flight is False

    async def test_flag_cleared_after_failure(self) -> None:
        attempts: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(1)
            return httpx.Response(500)

        service = _service(httpx.MockTransport(handler))
        await service.generate_suggestions([STORY])
        await service.generate_suggestions([STORY])
        assert len(attempts) == 2
        assert service.in_flight is False


@pytest.mark.parametrize("status", [400, 429, 503])
async def test_status_without_error_body(status: int) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(status, text="oops"))
    [diagnostic] = await _service(transport).generate_suggestions([STORY])
    assert diagnostic.message == f"API request failed with status {status}"
