"""
Pydantic models for the card service.

All data shapes defined here. No imports from services or routes.
"""

from backend.models.card import RenderRequest, SaveCardRequest, SaveCardResponse

__all__ = [
    "SaveCardRequest",
    "SaveCardResponse",
    "RenderRequest",
]
