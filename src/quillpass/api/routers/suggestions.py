"""AI suggestion endpoints: POST /suggestions, GET /suggestions/status."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from quillpass.api.deps import get_suggestion_service
from quillpass.api.schemas import (
    SuggestionsRequest,
    SuggestionsResponse,
    SuggestionsStatusResponse,
)
from quillpass.service.suggestions import SuggestionService

logger = logging.getLogger("quillpass.api")

router = APIRouter()


@router.post("", response_model=SuggestionsResponse)
async def generate_suggestions(
    body: SuggestionsRequest,
    service: SuggestionService = Depends(get_suggestion_service),  # noqa: B008
) -> SuggestionsResponse:
    """Ask the generation service for writing suggestions on the documents."""
    logger.info("AI suggestions requested for %d document(s)", len(body.documents))
    diagnostics = await service.generate_suggestions(body.documents)
    return SuggestionsResponse(diagnostics=diagnostics)


@router.get("/status", response_model=SuggestionsStatusResponse)
async def suggestions_status(
    service: SuggestionService = Depends(get_suggestion_service),  # noqa: B008
) -> SuggestionsStatusResponse:
    """Report whether a credential is configured and whether a request is running."""
    return SuggestionsStatusResponse(has_api_key=service.has_api_key(), in_flight=service.in_flight)
