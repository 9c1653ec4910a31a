"""Tests for the card API client (httpx.MockTransport in place of the server)."""

from __future__ import annotations

import json

import httpx
import pytest

from card_cli.client import ApiClient
from engine.card.errors import CardNotFound, ResourceTooLarge, StructuralValidationError, TransientIOFailure

CARD = {"intro": {"title": "Hi"}, "sections": [{"id": "a", "title": "One"}]}


def make_client(handler, **kwargs):
    return ApiClient("http://cards.test/", transport=httpx.MockTransport(handler), **kwargs)


class TestSaveCard:
    def test_posts_config_and_returns_id(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "k3j9x0ab"})

        client = make_client(handler)
        assert client.save_card(CARD) == "k3j9x0ab"
        assert seen[0].url.path == "/api/card"
        assert json.loads(seen[0].content) == {"config": CARD}

    def test_oversized_card_never_sent(self):
        seen = []
        client = make_client(lambda r: seen.append(r) or httpx.Response(200, json={"id": "x"}), max_bytes=100)
        cfg = {"intro": {"title": "x", "image": "data:image/png;base64," + "A" * 500}, "sections": []}
        with pytest.raises(ResourceTooLarge) as exc:
            client.save_card(cfg)
        assert "too large to share" in str(exc.value)
        assert seen == []

    def test_server_413(self):
        client = make_client(lambda r: httpx.Response(413, json={"error": "Card is too large. Try using smaller images."}))
        with pytest.raises(ResourceTooLarge) as exc:
            client.save_card(CARD)
        assert str(exc.value) == "Card is too large. Try using smaller images."

    def test_server_400(self):
        client = make_client(lambda r: httpx.Response(400, json={"error": "Invalid config format."}))
        with pytest.raises(StructuralValidationError):
            client.save_card(CARD)

    def test_server_500(self):
        client = make_client(lambda r: httpx.Response(500, json={"error": "Internal server error"}))
        with pytest.raises(TransientIOFailure):
            client.save_card(CARD)

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransientIOFailure):
            make_client(handler).save_card(CARD)

    def test_invalid_card_not_sent(self):
        seen = []
        client = make_client(lambda r: seen.append(r) or httpx.Response(200, json={"id": "x"}))
        with pytest.raises(StructuralValidationError):
            client.save_card({"sections": []})
        assert seen == []


class TestLoadCard:
    def test_fetches_by_id(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=CARD)

        assert make_client(handler).load_card("k3j9x0ab") == CARD
        assert seen[0].url.params["id"] == "k3j9x0ab"

    def test_not_found(self):
        client = make_client(lambda r: httpx.Response(404, json={"error": "Card not found"}))
        with pytest.raises(CardNotFound):
            client.load_card("gone0000")

    def test_share_url(self):
        assert make_client(lambda r: httpx.Response(200)).share_url("k3j9x0ab") == "http://cards.test/#card=k3j9x0ab"
