"""
Tests for the KV REST storage client.

The store is replaced with httpx.MockTransport; each test inspects the
command body the client sent and feeds back a canned response.
"""

from __future__ import annotations

import json

import httpx
import pytest

from backend.services.kv import KVStorage
from engine.card.errors import ResourceTooLarge, TransientIOFailure


def make_storage(handler):
    return KVStorage("https://kv.test/", "secret-token", transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Retries back off with asyncio.sleep; skip the wait."""

    async def instant(_seconds):
        return None

    monkeypatch.setattr("backend.services.kv.asyncio.sleep", instant)


class TestCommands:
    async def test_set_with_expiry(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"result": "OK"})

        storage = make_storage(handler)
        await storage.put("card:abc12345", '{"intro": {}}', 7776000)
        await storage.close()

        request = seen[0]
        assert request.method == "POST"
        assert request.url.host == "kv.test"
        assert request.headers["authorization"] == "Bearer secret-token"
        assert json.loads(request.content) == ["SET", "card:abc12345", '{"intro": {}}', "EX", "7776000"]

    async def test_get_hit(self):
        storage = make_storage(lambda request: httpx.Response(200, json={"result": '{"a": 1}'}))
        assert await storage.get("card:x") == '{"a": 1}'
        await storage.close()

    async def test_get_miss(self):
        storage = make_storage(lambda request: httpx.Response(200, json={"result": None}))
        assert await storage.get("card:x") is None
        await storage.close()


class TestErrors:
    async def test_max_request_size(self):
        storage = make_storage(
            lambda request: httpx.Response(400, json={"error": "ERR max request size exceeded. Limit: 1048576 bytes"})
        )
        with pytest.raises(ResourceTooLarge):
            await storage.put("card:x", "big", 10)
        await storage.close()

    async def test_other_store_error(self):
        storage = make_storage(lambda request: httpx.Response(400, json={"error": "WRONGPASS invalid password"}))
        with pytest.raises(TransientIOFailure) as exc:
            await storage.get("card:x")
        assert "WRONGPASS" in str(exc.value)
        await storage.close()

    async def test_retries_once_on_unavailable(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(503, text="unavailable")
            return httpx.Response(200, json={"result": "v"})

        storage = make_storage(handler)
        assert await storage.get("card:x") == "v"
        assert len(calls) == 2
        await storage.close()

    async def test_network_failure_after_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        storage = make_storage(handler)
        with pytest.raises(TransientIOFailure):
            await storage.get("card:x")
        assert len(calls) == 2
        await storage.close()
