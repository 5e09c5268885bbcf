"""Regression tests for RequestBodyLimitMiddleware."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from quillpass.api.app import create_app, create_services
from quillpass.api.deps import init_services, reset_services
from quillpass.settings import Settings


@pytest.fixture
def app(settings: Settings):
    application = create_app(settings=settings)
    init_services(*create_services(settings))
    yield application
    reset_services()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestInvalidContentLength:
    """Malformed Content-Length must be rejected, not cause a 500."""

    async def test_non_integer_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "not-a-number"},
        )
        assert response.status_code == 400

    async def test_negative_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "-1"},
        )
        assert response.status_code == 400


class TestDeclaredOverLimit:
    async def test_declared_length_over_document_limit(self, client: AsyncClient) -> None:
        response = await client.post(
            "/build",
            content=b"{}",
            headers={"content-length": str(10 * 1024 * 1024 + 1)},
        )
        assert response.status_code == 413
        assert "10 MB" in response.json()["detail"]


class TestChunkedOverLimit:
    """Chunked (no Content-Length) body over limit is still rejected."""

    async def test_chunked_body_over_default_limit(self, client: AsyncClient) -> None:
        """Body exceeding 1 MB default limit without Content-Length header."""
        oversized = b"x" * (1 * 1024 * 1024 + 1)
        response = await client.post(
            "/passes",
            content=oversized,
            headers={"transfer-encoding": "chunked"},
        )
        assert response.status_code == 413
        assert "too large" in response.json()["detail"]

    async def test_document_endpoint_allows_larger_body(self, client: AsyncClient) -> None:
        """A 2 MB body passes the limit on /suggestions and reaches validation."""
        padding = "x" * (2 * 1024 * 1024)
        body = f'{{"documents": [{{"id": "d1", "title": "T", "content": "{padding}"}}]}}'
        response = await client.post(
            "/suggestions",
            content=body.encode(),
            headers={"transfer-encoding": "chunked", "content-type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["diagnostics"] == []
