"""Analysis passes and the registry that resolves them for a build."""

from __future__ import annotations

from quillpass.passes.base import Pass, PassContext
from quillpass.passes.citation import CitationPass
from quillpass.passes.formatting import FormattingPass
from quillpass.passes.grammar import GrammarPass
from quillpass.passes.registry import PassRegistry
from quillpass.service.languagetool import LanguageToolClient
from quillpass.settings import Settings


def create_default_registry(settings: Settings | None = None) -> PassRegistry:
    """Registry holding the built-in passes, configured from *settings*."""
    if settings is None:
        settings = Settings()
    registry = PassRegistry()
    registry.register(FormattingPass())
    registry.register(
        GrammarPass(
            LanguageToolClient(
                settings.languagetool_url,
                language=settings.languagetool_language,
                availability_timeout=settings.grammar_availability_timeout,
                request_timeout=settings.grammar_request_timeout,
            )
        )
    )
    registry.register(CitationPass())
    return registry


__all__ = [
    "CitationPass",
    "FormattingPass",
    "GrammarPass",
    "Pass",
    "PassContext",
    "PassRegistry",
    "create_default_registry",
]
