"""API request/response Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from quillpass.models.content import ContentNode
from quillpass.models.diagnostics import Diagnostic, PassKind
from quillpass.models.project import Project, SuggestionDocument


class BuildRequest(BaseModel):
    """Request body for POST /build."""

    project: Project
    document_contents: dict[str, ContentNode] = Field(
        default_factory=dict,
        alias="documentContents",
        description="Content tree per document id",
    )

    model_config = {"populate_by_name": True}


class PassInfo(BaseModel):
    """A registered pass."""

    id: str
    name: str
    kind: PassKind


class PassListResponse(BaseModel):
    """Response for GET /passes."""

    passes: list[PassInfo] = []


class SuggestionsRequest(BaseModel):
    """Request body for POST /suggestions."""

    documents: list[SuggestionDocument] = []


class SuggestionsResponse(BaseModel):
    """Response for POST /suggestions."""

    diagnostics: list[Diagnostic] = []


class SuggestionsStatusResponse(BaseModel):
    """Response for GET /suggestions/status."""

    has_api_key: bool = Field(alias="hasApiKey")
    in_flight: bool = Field(False, alias="inFlight")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = ""
