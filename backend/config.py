"""
Holiday card service configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # KV store (Upstash-compatible REST API)
    KV_REST_API_URL: str = os.environ.get("KV_REST_API_URL", "")
    KV_REST_API_TOKEN: str = os.environ.get("KV_REST_API_TOKEN", "")
    KV_TIMEOUT_SECONDS: float = float(os.environ.get("KV_TIMEOUT_SECONDS", "10"))

    # Cards
    CARD_TTL_DAYS: int = int(os.environ.get("CARD_TTL_DAYS", "90"))
    MAX_REQUEST_BYTES: int = int(os.environ.get("MAX_REQUEST_BYTES", str(10 * 1024 * 1024)))

    # Assets
    ASSET_BASE_URL: str = os.environ.get("ASSET_BASE_URL", "")
    STYLESHEET: str = os.environ.get("STYLESHEET", "/card-styles.css")

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def CARD_TTL_SECONDS(self) -> int:
        return self.CARD_TTL_DAYS * 24 * 60 * 60

    @property
    def PUBLIC_URL(self) -> str:
        url = os.environ.get("PUBLIC_URL")
        if url:
            return url
        return "http://localhost:8000" if self.ENVIRONMENT == "development" else "https://card.example.com"


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing:
    if not settings.KV_REST_API_URL:
        raise RuntimeError("KV_REST_API_URL environment variable is required")
    if not settings.KV_REST_API_TOKEN:
        raise RuntimeError("KV_REST_API_TOKEN environment variable is required")
