"""Card request and response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SaveCardRequest(BaseModel):
    """What the builder sends to POST /api/card."""

    model_config = {"extra": "forbid"}

    config: dict[str, Any] | None = None


class SaveCardResponse(BaseModel):
    """What the save endpoint returns."""

    id: str


class RenderRequest(BaseModel):
    """What the builder sends to POST /api/render for a preview."""

    model_config = {"extra": "forbid"}

    config: dict[str, Any]
    title: str | None = Field(default=None, max_length=200)
    include_script: bool = True
