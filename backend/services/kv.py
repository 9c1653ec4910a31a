"""Key-value card storage over an Upstash-compatible REST API."""

from __future__ import annotations

import asyncio
import logging

import httpx

from backend.config import settings
from engine.card.assembly import CardStorage
from engine.card.errors import ResourceTooLarge, TransientIOFailure

logger = logging.getLogger(__name__)

# Error text the KV store returns when a command body is over its limit
_TOO_LARGE_MARKER = "max request size exceeded"

# Status codes worth one more attempt
_RETRYABLE_STATUS = {429, 502, 503, 504}


class KVStorage(CardStorage):
    """
    Card storage backed by a Redis REST endpoint.

    Every command is a POST of ``[command, *args]`` with a bearer token;
    the response is ``{"result": ...}`` or ``{"error": "..."}``.
    """

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = (url if url is not None else settings.KV_REST_API_URL).rstrip("/")
        self.token = token if token is not None else settings.KV_REST_API_TOKEN
        self.timeout = timeout if timeout is not None else settings.KV_TIMEOUT_SECONDS
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"Authorization": f"Bearer {self.token}"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def command(self, *args: str | int, max_retries: int = 1):
        """
        Run one command and return its result.

        Raises:
            ResourceTooLarge: the store refused the body size
            TransientIOFailure: network failure or any other store error
        """
        body = [str(a) for a in args]
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                res = await self._get_client().post(self.url, json=body)
            except httpx.HTTPError as e:
                last_error = e
                if attempt < max_retries:
                    wait_time = 2**attempt
                    logger.warning("kv: %s failed (attempt %d), retrying in %ds: %s", body[0], attempt + 1, wait_time, e)
                    await asyncio.sleep(wait_time)
                    continue
                break

            try:
                data = res.json()
            except ValueError:
                data = {}
            error = data.get("error") if isinstance(data, dict) else None

            if error and _TOO_LARGE_MARKER in str(error).lower():
                raise ResourceTooLarge("Card is too large. Try using smaller images.")
            if res.status_code == 413:
                raise ResourceTooLarge("Card is too large. Try using smaller images.")

            if res.status_code in _RETRYABLE_STATUS and attempt < max_retries:
                wait_time = 2**attempt
                logger.warning("kv: %s returned %d (attempt %d), retrying in %ds", body[0], res.status_code, attempt + 1, wait_time)
                await asyncio.sleep(wait_time)
                continue

            if error or res.status_code >= 400:
                raise TransientIOFailure(f"KV {body[0]} failed ({res.status_code}): {error or res.text}")

            return data.get("result") if isinstance(data, dict) else None

        raise TransientIOFailure(f"KV {body[0]} failed: {last_error}") from last_error

    async def get(self, key: str) -> str | None:
        result = await self.command("GET", key)
        if result is None:
            return None
        return str(result)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.command("SET", key, value, "EX", ttl_seconds)


kv_storage = KVStorage()
