"""Dependency injection for FastAPI — engine and suggestion service singletons."""

from __future__ import annotations

from quillpass.engine.pipeline import PassEngine
from quillpass.service.suggestions import SuggestionService

_engine: PassEngine | None = None
_suggestion_service: SuggestionService | None = None


def init_services(engine: PassEngine, suggestion_service: SuggestionService) -> None:
    """Set the global engine and suggestion service (called at app startup)."""
    global _engine, _suggestion_service  # noqa: PLW0603
    _engine = engine
    _suggestion_service = suggestion_service


def get_engine() -> PassEngine:
    """FastAPI ``Depends`` provider for the pass engine."""
    if _engine is None:
        raise RuntimeError("PassEngine not initialised — call init_services() first")
    return _engine


def get_suggestion_service() -> SuggestionService:
    """FastAPI ``Depends`` provider for the suggestion service."""
    if _suggestion_service is None:
        raise RuntimeError("SuggestionService not initialised — call init_services() first")
    return _suggestion_service


def reset_services() -> None:
    """Clear the globals (for tests)."""
    global _engine, _suggestion_service  # noqa: PLW0603
    _engine = None
    _suggestion_service = None
