"""
Pytest configuration and fixtures for card service tests.
"""

from __future__ import annotations

import os

# Set test environment variables before importing config
os.environ["TESTING"] = "true"
os.environ.setdefault("KV_REST_API_URL", "https://kv.test")
os.environ.setdefault("KV_REST_API_TOKEN", "test-kv-token")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from backend.main import app  # noqa: E402
from backend.routes.cards import get_assembly  # noqa: E402
from engine.card.assembly import CardAssembly, MemoryStorage  # noqa: E402


@pytest.fixture
def storage():
    """In-memory card storage shared by the app and the test."""
    return MemoryStorage()


@pytest.fixture
def assembly(storage):
    return CardAssembly(storage, max_bytes=64 * 1024)


@pytest_asyncio.fixture
async def async_client(assembly):
    """Async HTTP client against the ASGI app, with storage swapped for memory."""
    app.dependency_overrides[get_assembly] = lambda: assembly
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
