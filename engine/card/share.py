"""
Holiday Card Kernel — Import, Export and Share Links

- Export: the config as pretty-printed JSON, offered as card-config.json.
- Import: parse + structural validation; malformed documents are rejected
  whole, never partially adopted.
- Share links: "#card=<id>" points at a stored card; the legacy
  "#config=<payload>" carries the whole config as base64 of the
  percent-encoded JSON. Legacy links refuse inline media (data: URLs),
  which blow past any sane URL length.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

from engine.card.errors import ResourceTooLarge, StructuralValidationError
from engine.card.validation import ensure_valid_config

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "card-config.json"
CARD_PREFIX = "#card="
CONFIG_PREFIX = "#config="

# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


def export_config(config: dict[str, Any]) -> str:
    return json.dumps(config, indent=2, ensure_ascii=False)


def import_config(text: str | bytes) -> dict[str, Any]:
    """Parse and validate a user-supplied file. Raises StructuralValidationError."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StructuralValidationError("Invalid JSON file. Please check the format.") from e
    return ensure_valid_config(data)


def payload_size(config: dict[str, Any]) -> int:
    """Size in bytes of the save request body for this config."""
    return len(json.dumps({"config": config}, ensure_ascii=False).encode("utf-8"))


# ---------------------------------------------------------------------------
# Inline media
# ---------------------------------------------------------------------------


def find_inline_media(config: Any, path: str = "") -> list[str]:
    """Field paths whose value is an inline data: URL."""
    found: list[str] = []
    if isinstance(config, dict):
        for key, value in config.items():
            found.extend(find_inline_media(value, f"{path}.{key}" if path else str(key)))
    elif isinstance(config, list):
        for i, value in enumerate(config):
            found.extend(find_inline_media(value, f"{path}.{i}" if path else str(i)))
    elif isinstance(config, str) and config.startswith("data:"):
        found.append(path)
    return found


# ---------------------------------------------------------------------------
# Share fragments
# ---------------------------------------------------------------------------


@dataclass
class Location:
    """What a document-location fragment points at."""

    kind: str  # "card" | "config" | "none"
    card_id: str | None = None
    config: dict[str, Any] | None = None


def card_fragment(card_id: str) -> str:
    return f"{CARD_PREFIX}{card_id}"


def encode_config_fragment(config: dict[str, Any]) -> str:
    """Legacy share link. Raises ResourceTooLarge when the config embeds media."""
    inline = find_inline_media(config)
    if inline:
        raise ResourceTooLarge(
            "This card contains uploaded media that is too large for a link. "
            "Use a share link or export the JSON instead. Fields: " + ", ".join(inline),
            size_bytes=payload_size(config),
        )
    encoded = quote(json.dumps(config, ensure_ascii=False, separators=(",", ":")), safe="")
    return CONFIG_PREFIX + base64.b64encode(encoded.encode("ascii")).decode("ascii")


def decode_config_fragment(payload: str) -> dict[str, Any]:
    """Decode the part after "#config=". Raises StructuralValidationError."""
    try:
        encoded = base64.b64decode(payload, validate=True).decode("ascii")
        data = json.loads(unquote(encoded))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, ValueError) as e:
        raise StructuralValidationError("Share link is corrupted and could not be decoded.") from e
    return ensure_valid_config(data)


def parse_location(fragment: str | None) -> Location:
    """
    Classify a location fragment. Corrupt legacy payloads are logged and
    treated as no fragment, so the caller falls back to its default.
    """
    if not fragment:
        return Location(kind="none")

    if fragment.startswith(CARD_PREFIX):
        card_id = fragment[len(CARD_PREFIX) :]
        if card_id:
            return Location(kind="card", card_id=card_id)
        return Location(kind="none")

    if fragment.startswith(CONFIG_PREFIX):
        try:
            return Location(kind="config", config=decode_config_fragment(fragment[len(CONFIG_PREFIX) :]))
        except StructuralValidationError as e:
            logger.warning("share: failed to load config from fragment: %s", e)

    return Location(kind="none")
