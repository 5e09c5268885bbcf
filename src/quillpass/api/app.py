"""FastAPI application factory for QuillPass."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from quillpass import __version__
from quillpass.api.deps import init_services, reset_services
from quillpass.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from quillpass.api.routers import build, passes, suggestions
from quillpass.api.schemas import HealthResponse
from quillpass.engine.pipeline import PassEngine
from quillpass.passes import create_default_registry
from quillpass.service.suggestions import SuggestionService
from quillpass.settings import Settings


def create_services(settings: Settings) -> tuple[PassEngine, SuggestionService]:
    """Compose the pass engine and suggestion service from *settings*."""
    engine = PassEngine(create_default_registry(settings))
    service = SuggestionService(
        settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.suggestions_model,
        max_input_chars=settings.suggestions_max_input_chars,
        timeout=settings.suggestions_request_timeout,
    )
    return engine, service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Install the engine and suggestion service for the application's lifetime."""
    settings: Settings = app.state.settings
    engine, service = create_services(settings)
    init_services(engine, service)
    try:
        yield
    finally:
        reset_services()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="QuillPass",
        description=(
            "Runs citation, formatting, grammar and AI suggestion passes over "
            "rich-text documents and reports diagnostics."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(RequestBodyLimitMiddleware)

    app.include_router(build.router, prefix="/build", tags=["build"])
    app.include_router(passes.router, prefix="/passes", tags=["passes"])
    app.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("quillpass.api")
    logger.info(
        "QuillPass API Server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "quillpass.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
