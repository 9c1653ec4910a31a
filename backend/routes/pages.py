"""Card page serving — GET /c/{card_id} serves a stored card, POST /api/render previews one."""

from __future__ import annotations

import hashlib
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, Response

from backend.config import settings
from backend.models.card import RenderRequest
from backend.routes.cards import get_assembly
from engine.card.assembly import CardAssembly
from engine.card.errors import CardNotFound, StructuralValidationError, TransientIOFailure
from engine.card.renderer import render_page
from engine.card.types import RenderOptions
from engine.card.validation import ensure_valid_config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

# Cache-Control TTL: 5 minutes for stale-while-revalidate, 1 hour shared cache
_CACHE_CONTROL = "public, max-age=300, s-maxage=3600, stale-while-revalidate=86400"

_NOT_FOUND_HTML = "<html><body><h1>404 — Card not found</h1></body></html>"


def _options(title: str | None = None, url: str | None = None, include_script: bool = True) -> RenderOptions:
    return RenderOptions(
        title=title,
        stylesheet=settings.STYLESHEET,
        asset_base_url=settings.ASSET_BASE_URL,
        include_script=include_script,
        base_url=url or settings.PUBLIC_URL,
    )


@router.get("/c/{card_id}", response_class=HTMLResponse)
async def serve_card_page(card_id: str, assembly: CardAssembly = Depends(get_assembly)) -> Response:
    """
    Serve a stored card as a standalone page.

    Returns 404 if the id does not exist or the card has expired.

    Cache headers:
    - Cache-Control: public, 5-min browser TTL, 1-hour CDN TTL, 24h stale-while-revalidate
    - ETag: MD5 of the HTML content for conditional requests
    """
    try:
        config = await assembly.load(card_id)
    except CardNotFound:
        return HTMLResponse(content=_NOT_FOUND_HTML, status_code=404)
    except (StructuralValidationError, TransientIOFailure) as e:
        logger.error("pages: failed to load card %s: %s", card_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error") from e

    html_bytes = render_page(config, _options(url=f"{settings.PUBLIC_URL}/c/{card_id}")).encode("utf-8")
    etag = f'"{hashlib.md5(html_bytes, usedforsecurity=False).hexdigest()}"'

    return Response(
        content=html_bytes,
        media_type="text/html; charset=utf-8",
        headers={
            "Cache-Control": _CACHE_CONTROL,
            "ETag": etag,
            "X-Content-Type-Options": "nosniff",
        },
    )


@router.post("/api/render", response_class=HTMLResponse)
async def render_preview(req: RenderRequest) -> HTMLResponse:
    """Render a config the builder has not saved yet. Nothing is stored."""
    try:
        config = ensure_valid_config(req.config)
    except StructuralValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    html = render_page(config, _options(title=req.title, include_script=req.include_script))
    return HTMLResponse(content=html, headers={"Cache-Control": "no-store"})
