"""Card persistence routes — POST /api/card saves, GET /api/card?id= loads."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from backend.config import settings
from backend.models.card import SaveCardRequest, SaveCardResponse
from backend.services.kv import kv_storage
from engine.card.assembly import CardAssembly
from engine.card.errors import CardNotFound, ResourceTooLarge, StructuralValidationError, TransientIOFailure

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/card", tags=["cards"])

TOO_LARGE_MESSAGE = "Card is too large. Try using smaller images."


def get_assembly() -> CardAssembly:
    """Card assembly over the configured KV store. Overridden in tests."""
    return CardAssembly(
        kv_storage,
        max_bytes=settings.MAX_REQUEST_BYTES,
        ttl_seconds=settings.CARD_TTL_SECONDS,
    )


@router.post("", status_code=200)
async def save_card(
    req: SaveCardRequest,
    request: Request,
    assembly: CardAssembly = Depends(get_assembly),
) -> SaveCardResponse:
    """
    Store a card config and return its short id.

    The id is 8 characters from [a-z0-9]; the stored card expires after
    CARD_TTL_DAYS.
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > settings.MAX_REQUEST_BYTES:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=TOO_LARGE_MESSAGE)

    if req.config is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing config in request body")

    try:
        card_id = await assembly.save(req.config)
    except StructuralValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ResourceTooLarge as e:
        logger.warning("cards: save refused as too large: %s", e)
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=TOO_LARGE_MESSAGE) from e
    except TransientIOFailure as e:
        logger.error("cards: save failed: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from e

    return SaveCardResponse(id=card_id)


@router.get("", status_code=200)
async def load_card(
    id: str | None = Query(default=None),
    assembly: CardAssembly = Depends(get_assembly),
) -> dict[str, Any]:
    """Fetch a stored card config by id."""
    if not id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing id parameter")

    try:
        return await assembly.load(id)
    except CardNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found") from e
    except (StructuralValidationError, TransientIOFailure) as e:
        logger.error("cards: load failed for %s: %s", id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from e
