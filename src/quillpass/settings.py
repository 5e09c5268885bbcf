"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the QuillPass diagnostics server and external services.

    Values are read from environment variables (prefixed ``QUILLPASS_``) and
    from a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUILLPASS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # Cloud Run injects PORT; takes precedence over api_server_port

    @property
    def effective_port(self) -> int:
        """Return the port to listen on (``port`` takes precedence)."""
        return self.port if self.port is not None else self.api_server_port

    # Grammar checking (LanguageTool-compatible server)
    languagetool_url: str = "http://localhost:8010/v2"
    languagetool_language: str = "en-US"
    grammar_availability_timeout: float = 2.0
    grammar_request_timeout: float = 30.0

    # AI writing suggestions (Responses-compatible endpoint)
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    suggestions_model: str = "gpt-4.1"
    suggestions_max_input_chars: int = 100_000
    suggestions_request_timeout: float = 120.0
