"""Pass listing endpoints: GET /passes, GET /passes/{pass_id}."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from quillpass.api.deps import get_engine
from quillpass.api.schemas import PassInfo, PassListResponse
from quillpass.engine.pipeline import PassEngine
from quillpass.passes.base import Pass

router = APIRouter()


def _pass_info(pass_: Pass) -> PassInfo:
    return PassInfo(id=pass_.id, name=pass_.name, kind=pass_.kind)


@router.get("", response_model=PassListResponse)
async def list_passes(
    engine: PassEngine = Depends(get_engine),  # noqa: B008
) -> PassListResponse:
    """List all registered passes in registration order."""
    return PassListResponse(passes=[_pass_info(p) for p in engine.registry.all()])


@router.get("/{pass_id}", response_model=PassInfo)
async def get_pass(
    pass_id: str,
    engine: PassEngine = Depends(get_engine),  # noqa: B008
) -> PassInfo:
    """Describe a single registered pass."""
    pass_ = engine.registry.get(pass_id)
    if pass_ is None:
        raise HTTPException(status_code=404, detail=f"Pass '{pass_id}' not found")
    return _pass_info(pass_)
