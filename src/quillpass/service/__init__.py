"""Clients for the external grammar and generation services."""

from quillpass.service.languagetool import GrammarServiceError, LanguageToolClient
from quillpass.service.suggestions import SuggestionService, SuggestionServiceError

__all__ = [
    "GrammarServiceError",
    "LanguageToolClient",
    "SuggestionService",
    "SuggestionServiceError",
]
