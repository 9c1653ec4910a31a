"""
Configuration management for the card CLI.

Config structure (~/.card/config.json):
  {
    "default_url": "https://card.example.com",
    "recent_cards": ["k3j9x0ab", "..."]
  }

API URL resolution order:
  1. CARD_API_URL environment variable
  2. --api-url command line flag (passed via the constructor)
  3. default_url from config file
  4. Fallback: http://localhost:8000
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"
MAX_RECENT_CARDS = 20


class Config:
    """Config manager for the card CLI."""

    def __init__(self, api_url_override: str | None = None, config_dir: Path | None = None):
        self.config_dir = config_dir or Path.home() / ".card"
        self.config_file = self.config_dir / "config.json"
        self._data: dict = {}
        self._api_url_override = api_url_override
        self._load()

    def _load(self):
        """Load config from disk. A corrupt file is treated as empty."""
        if self.config_file.exists():
            try:
                with open(self.config_file) as f:
                    self._data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("config: ignoring unreadable %s: %s", self.config_file, e)
                self._data = {}
        if not isinstance(self._data, dict):
            self._data = {}

    def _save(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._data, f, indent=2)

    @property
    def api_url(self) -> str:
        env_url = os.environ.get("CARD_API_URL")
        if env_url:
            return env_url.rstrip("/")

        if self._api_url_override:
            return self._api_url_override.rstrip("/")

        return self._data.get("default_url", DEFAULT_API_URL).rstrip("/")

    @property
    def default_url(self) -> str:
        return self._data.get("default_url", DEFAULT_API_URL)

    @default_url.setter
    def default_url(self, value: str):
        self._data["default_url"] = value.rstrip("/")
        self._save()

    @property
    def recent_cards(self) -> list[str]:
        """Ids of cards shared from this machine, newest first."""
        return list(self._data.get("recent_cards", []))

    def remember_card(self, card_id: str):
        recent = [c for c in self.recent_cards if c != card_id]
        recent.insert(0, card_id)
        self._data["recent_cards"] = recent[:MAX_RECENT_CARDS]
        self._save()
