"""
Holiday Card Kernel — Assembly Layer

Sits between the pure functions (model, renderer) and the outside world
(the key-value store, the share endpoint). Coordinates saving and loading
cards by id.

Operations: save, load, resolve

This is where IO happens. The model and renderer are pure.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
from collections.abc import Awaitable, Callable
from typing import Any

from engine.card.errors import CardNotFound, ResourceTooLarge, StructuralValidationError, TransientIOFailure
from engine.card.presets import default_config
from engine.card.share import parse_location, payload_size
from engine.card.validation import ensure_valid_config

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 8
CARD_TTL_SECONDS = 90 * 24 * 60 * 60
MAX_SHARE_BYTES = 9 * 1024 * 1024


def generate_id(length: int = ID_LENGTH) -> str:
    """Short opaque card id from [a-z0-9]."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def card_key(card_id: str) -> str:
    return f"card:{card_id}"


def check_share_size(config: dict[str, Any], max_bytes: int = MAX_SHARE_BYTES) -> int:
    """Size of the save request for a config. Raises ResourceTooLarge over max_bytes."""
    size = payload_size(config)
    if size > max_bytes:
        size_mb = size / (1024 * 1024)
        raise ResourceTooLarge(
            f"Your card is too large to share ({size_mb:.1f}MB). "
            'Try using fewer or smaller images, or use "Export JSON" to save locally.',
            size_bytes=size,
            limit_bytes=max_bytes,
        )
    return size


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class CardStorage:
    """
    Abstract storage interface.
    Implement with the KV REST store for production, or in-memory for tests.
    """

    async def get(self, key: str) -> str | None:
        """Fetch a stored card JSON. Returns None if missing or expired."""
        raise NotImplementedError

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write a card JSON that expires after ttl_seconds."""
        raise NotImplementedError


class MemoryStorage(CardStorage):
    """In-memory storage for testing. Records TTLs but never expires anything."""

    def __init__(self) -> None:
        self.items: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.items.get(key)

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.items[key] = value
        self.ttls[key] = ttl_seconds


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


class CardAssembly:
    """Save and load cards by id with size and shape checks at the boundary."""

    def __init__(
        self,
        storage: CardStorage,
        *,
        max_bytes: int = MAX_SHARE_BYTES,
        ttl_seconds: int = CARD_TTL_SECONDS,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self.storage = storage
        self.max_bytes = max_bytes
        self.ttl_seconds = ttl_seconds
        self.id_factory = id_factory

    def check_size(self, config: dict[str, Any]) -> int:
        return check_share_size(config, self.max_bytes)

    async def save(self, config: dict[str, Any]) -> str:
        """Store a config and return its new id."""
        ensure_valid_config(config)
        size = self.check_size(config)
        card_id = self.id_factory()
        await self.storage.put(card_key(card_id), json.dumps(config, ensure_ascii=False), self.ttl_seconds)
        logger.info("assembly: saved card id=%s size=%d", card_id, size)
        return card_id

    async def load(self, card_id: str) -> dict[str, Any]:
        """Fetch and validate a stored config. Raises CardNotFound / StructuralValidationError."""
        raw = await self.storage.get(card_key(card_id))
        if raw is None:
            raise CardNotFound(f"Card not found: {card_id}")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StructuralValidationError(f"Stored card {card_id} is not valid JSON") from e
        return ensure_valid_config(data)

    async def resolve(
        self,
        fragment: str | None,
        fallback: Callable[[], Awaitable[dict[str, Any] | None]] | None = None,
    ) -> dict[str, Any]:
        """
        Config for a document-location fragment:
        "#card=<id>" → stored card, "#config=<payload>" → decoded card,
        otherwise the optional fallback loader, otherwise the default card.
        Failures fall back to the default card.
        """
        location = parse_location(fragment)

        if location.kind == "card" and location.card_id:
            try:
                return await self.load(location.card_id)
            except (CardNotFound, StructuralValidationError, TransientIOFailure) as e:
                logger.warning("assembly: failed to load card %s: %s", location.card_id, e)
                return default_config()

        if location.kind == "config" and location.config is not None:
            return location.config

        if fallback is not None:
            try:
                loaded = await fallback()
            except TransientIOFailure as e:
                logger.info("assembly: no fallback card, using default: %s", e)
                loaded = None
            if loaded is not None:
                try:
                    return ensure_valid_config(loaded)
                except StructuralValidationError as e:
                    logger.warning("assembly: fallback card rejected: %s", e)

        return default_config()
