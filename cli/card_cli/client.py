"""HTTP client for the card persistence endpoint."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from engine.card.assembly import MAX_SHARE_BYTES, check_share_size
from engine.card.errors import CardNotFound, ResourceTooLarge, StructuralValidationError, TransientIOFailure
from engine.card.share import card_fragment
from engine.card.validation import ensure_valid_config

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Save and load cards by id over HTTP.

    Failures surface as card errors: 413 → ResourceTooLarge, 404 → CardNotFound,
    400 → StructuralValidationError, anything else → TransientIOFailure.
    """

    def __init__(
        self,
        api_url: str,
        *,
        max_bytes: int = MAX_SHARE_BYTES,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.max_bytes = max_bytes
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def _headers(self) -> dict:
        return {"Content-Type": "application/json", "Accept": "application/json"}

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.api_url}{path}"
        try:
            res = self.client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise TransientIOFailure(f"Could not reach {self.api_url}: {e}") from e

        if res.status_code < 400:
            return res

        message = _error_message(res)
        if res.status_code == 413:
            raise ResourceTooLarge(message or "Card is too large. Try using smaller images.")
        if res.status_code == 404:
            raise CardNotFound(message or "Card not found")
        if res.status_code == 400:
            raise StructuralValidationError(message or "Invalid card")
        raise TransientIOFailure(f"{method} {path} failed ({res.status_code}): {message or res.text}")

    def save_card(self, config: dict[str, Any]) -> str:
        """Store a config and return its id. Oversized cards never leave the machine."""
        ensure_valid_config(config)
        size = check_share_size(config, self.max_bytes)
        logger.info("client: saving card (%d bytes) to %s", size, self.api_url)

        data = self._request("POST", "/api/card", json={"config": config}).json()
        card_id = data.get("id") if isinstance(data, dict) else None
        if not card_id:
            raise TransientIOFailure("Server did not return a card id")
        return card_id

    def load_card(self, card_id: str) -> dict[str, Any]:
        """Fetch a stored config by id."""
        res = self._request("GET", "/api/card", params={"id": card_id})
        try:
            data = res.json()
        except ValueError as e:
            raise TransientIOFailure("Server returned a malformed card") from e
        return ensure_valid_config(data)

    def share_url(self, card_id: str) -> str:
        return f"{self.api_url}/{card_fragment(card_id)}"

    def close(self):
        self.client.close()


def _error_message(res: httpx.Response) -> str | None:
    try:
        data = res.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None
