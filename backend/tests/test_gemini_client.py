"""Tests for the Gemini wrapper (no network: the client is faked)."""

from types import SimpleNamespace

import pytest

from config import settings
from services import gemini_client


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append((model, contents))
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def _install(monkeypatch, models):
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(gemini_client, "_client", SimpleNamespace(aio=SimpleNamespace(models=models)))


class TestStripCodeFences:
    def test_plain(self):
        assert gemini_client.strip_code_fences(' {"a": 1} ') == '{"a": 1}'

    def test_fenced(self):
        assert gemini_client.strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


class TestIsEnabled:
    def test_requires_key_and_switch(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        assert not gemini_client.is_enabled()
        monkeypatch.setattr(settings, "gemini_api_key", "k")
        monkeypatch.setattr(settings, "enrichment_enabled", False)
        assert not gemini_client.is_enabled()
        monkeypatch.setattr(settings, "enrichment_enabled", True)
        assert gemini_client.is_enabled()


class TestGenerateJson:
    @pytest.mark.asyncio
    async def test_parses_fenced_json(self, monkeypatch):
        models = FakeModels(text='```json\n{"explanation": "ok"}\n```')
        _install(monkeypatch, models)
        assert await gemini_client.generate_json("prompt") == {"explanation": "ok"}
        assert models.calls == [(settings.gemini_model, "prompt")]

    @pytest.mark.asyncio
    async def test_invalid_json_returns_none(self, monkeypatch):
        _install(monkeypatch, FakeModels(text="not json"))
        assert await gemini_client.generate_json("prompt") is None

    @pytest.mark.asyncio
    async def test_non_object_returns_none(self, monkeypatch):
        _install(monkeypatch, FakeModels(text="[1, 2]"))
        assert await gemini_client.generate_json("prompt") is None

    @pytest.mark.asyncio
    async def test_api_error_returns_none(self, monkeypatch):
        _install(monkeypatch, FakeModels(error=RuntimeError("quota exceeded")))
        assert await gemini_client.generate_json("prompt") is None

    @pytest.mark.asyncio
    async def test_disabled_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        assert await gemini_client.generate_json("prompt") is None
