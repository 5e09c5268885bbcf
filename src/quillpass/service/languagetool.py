"""Async client for a LanguageTool-compatible grammar checking server."""

from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger("quillpass.grammar")


class GrammarServiceError(Exception):
    """Raised when the grammar server rejects a request or returns garbage."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class Replacement(BaseModel):
    value: str


class RuleCategory(BaseModel):
    id: str
    name: str


class Rule(BaseModel):
    id: str
    description: str = ""
    category: RuleCategory


class MatchContext(BaseModel):
    text: str
    offset: int
    length: int


class GrammarMatch(BaseModel):
    """One finding: a span of the submitted text plus remedies."""

    message: str
    short_message: str | None = Field(None, alias="shortMessage")
    offset: int
    length: int
    replacements: list[Replacement] = []
    rule: Rule
    context: MatchContext

    model_config = {"populate_by_name": True}


class CheckResponse(BaseModel):
    matches: list[GrammarMatch] = []
    language: dict[str, object] | None = None


class LanguageToolClient:
    """Talks to ``GET /languages`` (liveness) and ``POST /check``.

    A fresh :class:`httpx.AsyncClient` is opened per call; pass *transport*
    to route requests elsewhere (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8010/v2",
        *,
        language: str = "en-US",
        availability_timeout: float = 2.0,
        request_timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.language = language
        self.availability_timeout = availability_timeout
        self.request_timeout = request_timeout
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=self._transport
        )

    async def is_available(self) -> bool:
        """Ping the server; any failure, including the timeout, means unavailable."""
        try:
            async with asyncio.timeout(self.availability_timeout):
                async with self._client(self.availability_timeout) as client:
                    resp = await client.get("/languages")
        except (httpx.HTTPError, TimeoutError) as exc:
            logger.warning("LanguageTool server not reachable at %s: %s", self.base_url, exc)
            return False
        if not resp.is_success:
            logger.warning(
                "LanguageTool liveness check failed at %s (HTTP %d)",
                self.base_url, resp.status_code,
            )
        return resp.is_success

    async def check(self, text: str, language: str | None = None) -> list[GrammarMatch]:
        """Submit *text* and return the server's matches."""
        async with self._client(self.request_timeout) as client:
            resp = await client.post(
                "/check",
                data={
                    "text": text,
                    "language": language or self.language,
                    "enabledOnly": "false",
                },
            )
        if not resp.is_success:
            raise GrammarServiceError(
                f"LanguageTool API error: {resp.status_code}", status_code=resp.status_code
            )
        try:
            payload = CheckResponse.model_validate_json(resp.content)
        except ValidationError as exc:
            logger.error("Malformed LanguageTool response: %s", exc)
            raise GrammarServiceError("LanguageTool returned a malformed response") from exc
        return payload.matches
