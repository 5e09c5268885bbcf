"""Build entry point: project + content trees → pass context → build result."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from quillpass.engine.pipeline import PassEngine
from quillpass.models.content import ContentNode
from quillpass.models.diagnostics import BuildResult, Diagnostic, Severity
from quillpass.models.project import DocumentType, DocumentWithContent, Project
from quillpass.passes.base import PassContext
from quillpass.text.flatten import flatten_text

logger = logging.getLogger("quillpass.engine")


def prepare_context(project: Project, contents: Mapping[str, ContentNode]) -> PassContext:
    """Collect the project's documents (folders excluded) with their trees and text.

    Documents without supplied content are analyzed as empty documents.
    """
    documents = []
    for entry in project.documents:
        if entry.type != DocumentType.DOCUMENT:
            continue
        content = contents.get(entry.id) or ContentNode.empty_document()
        documents.append(
            DocumentWithContent(
                id=entry.id,
                title=entry.title,
                content=content,
                plain_text=flatten_text(content),
            )
        )
    return PassContext(project=project, documents=tuple(documents), settings=project.settings)


async def run_project_build(
    engine: PassEngine, project: Project, contents: Mapping[str, ContentNode]
) -> BuildResult:
    """Prepare and run a build; unexpected failures become a failed build result."""
    started = time.monotonic()
    logger.info("Running build for project: %s", project.name)
    try:
        ctx = prepare_context(project, contents)
        return await engine.run_build(ctx)
    except Exception as exc:
        logger.exception("Build failed for project %s", project.name)
        return BuildResult(
            success=False,
            diagnostics=[
                Diagnostic(
                    id="build-error",
                    pass_id="system",
                    severity=Severity.ERROR,
                    title="Build Failed",
                    message=str(exc) or "Unknown error",
                    document_id="",
                )
            ],
            pass_results=[],
            total_timing=(time.monotonic() - started) * 1000,
        )
