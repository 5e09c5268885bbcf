"""Abstract analysis pass and the context every pass receives."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from quillpass.models.diagnostics import Diagnostic, Fix, PassKind, PassResult
from quillpass.models.project import DocumentWithContent, Project, ProjectSettings


@dataclass(frozen=True)
class PassContext:
    """Read-only view of the documents and settings for one build."""

    project: Project
    documents: tuple[DocumentWithContent, ...] = ()
    settings: ProjectSettings = field(default_factory=ProjectSettings)


class Pass(ABC):
    """Abstract base for all analysis passes.

    A pass reads the context and reports diagnostics; it never mutates
    documents or settings.
    """

    @property
    @abstractmethod
    def id(self) -> str: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    def kind(self) -> PassKind:
        return PassKind.LOCAL

    @abstractmethod
    async def run(self, ctx: PassContext) -> PassResult:
        """Analyze *ctx* and return the findings."""

    def _result(
        self, started: float, diagnostics: list[Diagnostic], fixes: list[Fix] | None = None
    ) -> PassResult:
        """Package findings with the elapsed time since *started* (``time.monotonic()``)."""
        return PassResult(
            pass_id=self.id,
            diagnostics=diagnostics,
            fixes=fixes or [],
            timing=(time.monotonic() - started) * 1000,
        )
