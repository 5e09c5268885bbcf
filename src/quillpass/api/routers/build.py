"""Build endpoint: POST /build."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from quillpass.api.deps import get_engine
from quillpass.api.schemas import BuildRequest
from quillpass.engine.build import run_project_build
from quillpass.engine.pipeline import PassEngine
from quillpass.models.diagnostics import BuildResult

router = APIRouter()


@router.post("", response_model=BuildResult)
async def run_build(
    body: BuildRequest,
    engine: PassEngine = Depends(get_engine),  # noqa: B008
) -> BuildResult:
    """Run the project's enabled passes over the supplied documents."""
    return await run_project_build(engine, body.project, body.document_contents)
