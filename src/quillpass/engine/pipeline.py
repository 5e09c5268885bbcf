"""Runs enabled passes in order and merges their findings into a build result."""

from __future__ import annotations

import logging
import time

from quillpass.models.diagnostics import BuildResult, Diagnostic, PassResult, Severity
from quillpass.passes.base import PassContext
from quillpass.passes.registry import PassRegistry

logger = logging.getLogger("quillpass.engine")


def _sort_key(diagnostic: Diagnostic) -> tuple[int, str]:
    return diagnostic.severity.rank, diagnostic.document_id


def sort_diagnostics(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    """Order by severity (error, warning, info), then by document id.

    The sort is stable, so findings of equal rank keep their pass order.
    """
    return sorted(diagnostics, key=_sort_key)


class PassEngine:
    """Orchestrates: enabled passes → sequential runs → merged, sorted diagnostics."""

    def __init__(self, registry: PassRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> PassRegistry:
        return self._registry

    async def run_build(self, ctx: PassContext) -> BuildResult:
        """Run every enabled pass against *ctx*.

        A pass that raises is reported as a single error diagnostic and the
        build moves on to the next pass.
        """
        started = time.monotonic()
        diagnostics: list[Diagnostic] = []
        pass_results: list[PassResult] = []

        for pass_ in self._registry.get_enabled(ctx.settings.enabled_passes):
            logger.info("Running pass: %s", pass_.name)
            try:
                result = await pass_.run(ctx)
            except Exception as exc:
                logger.exception("Pass %s failed", pass_.name)
                diagnostics.append(
                    Diagnostic(
                        id=f"{pass_.id}-error",
                        pass_id=pass_.id,
                        severity=Severity.ERROR,
                        title=f"{pass_.name} Failed",
                        message=str(exc) or "Unknown error",
                        document_id="",
                    )
                )
                continue
            pass_results.append(result)
            diagnostics.extend(result.diagnostics)

        diagnostics = sort_diagnostics(diagnostics)
        success = not any(d.severity == Severity.ERROR for d in diagnostics)
        total_timing = (time.monotonic() - started) * 1000

        logger.info(
            "Build finished (success=%s, diagnostics=%d, %.1f ms)",
            success, len(diagnostics), total_timing,
        )
        return BuildResult(
            success=success,
            diagnostics=diagnostics,
            pass_results=pass_results,
            total_timing=total_timing,
        )
