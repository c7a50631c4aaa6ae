"""Tests for the category suggestion route and the Gemini wrapper's parsing."""

import asyncio
import json

import pytest

from conftest import PNG_DATA_URL
from main import app
from utils.ai_assist import AIAssist, get_ai_assist
from utils.exceptions import ExternalServiceError


@pytest.mark.asyncio
async def test_suggest_category(client, fake_ai):
    response = await client.post("/ai/suggest-category", json={"imageData": PNG_DATA_URL})
    assert response.status_code == 200
    assert response.json() == {"category": "Plastic", "confidence": 0.8, "reasoning": "Clear PET bottles"}
    assert fake_ai.suggest_calls == [PNG_DATA_URL]


@pytest.mark.asyncio
async def test_suggest_category_without_key(client, fake_ai):
    fake_ai.enabled = False
    response = await client.post("/ai/suggest-category", json={"imageData": PNG_DATA_URL})
    assert response.status_code == 500
    assert response.json()["detail"] == "AI Key missing"


@pytest.mark.asyncio
async def test_suggest_category_failure(client, fake_ai):
    fake_ai.fail_with("AI request failed: quota exceeded")
    response = await client.post("/ai/suggest-category", json={"imageData": PNG_DATA_URL})
    assert response.status_code == 500
    assert "quota" in response.json()["detail"]


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, text=None, delay=0):
        self.text = text
        self.delay = delay
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.delay:
            await asyncio.sleep(self.delay)
        return FakeResponse(self.text)


class FakeClient:
    def __init__(self, models):
        self.aio = type("Aio", (), {"models": models})()


def assist_with(models, timeout=5):
    assist = AIAssist(api_key="test-key", model="gemini-test", timeout=timeout)
    assist._client = FakeClient(models)
    return assist


@pytest.mark.asyncio
async def test_audit_listing_parses_and_clamps():
    models = FakeModels(json.dumps({"is_verified": True, "notes": "Matches", "confidence": 1.7}))
    verdict = await assist_with(models).audit_listing("PET Flakes", "Clean flakes", "Plastic", "Sorted/Clean", PNG_DATA_URL)

    assert verdict == {"is_verified": True, "notes": "Matches", "confidence": 1.0}
    assert models.calls[0]["model"] == "gemini-test"


@pytest.mark.asyncio
async def test_unknown_category_becomes_other():
    models = FakeModels(json.dumps({"category": "Rubber", "confidence": 0.4}))
    suggestion = await assist_with(models).suggest_category(PNG_DATA_URL)
    assert suggestion["category"] == "Other"
    assert suggestion["reasoning"] is None


@pytest.mark.asyncio
async def test_malformed_and_slow_responses_raise():
    with pytest.raises(ExternalServiceError):
        await assist_with(FakeModels("not json")).suggest_category(PNG_DATA_URL)

    with pytest.raises(ExternalServiceError):
        await assist_with(FakeModels("{}", delay=1), timeout=0.01).suggest_category(PNG_DATA_URL)


def test_missing_key():
    assist = AIAssist(api_key="")
    assert assist.enabled is False
    with pytest.raises(ExternalServiceError) as excinfo:
        assist.client
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_suggest_category_rejects_malformed_image(client):
    models = FakeModels(json.dumps({"category": "Metal"}))
    app.dependency_overrides[get_ai_assist] = lambda: assist_with(models)

    response = await client.post("/ai/suggest-category", json={"imageData": "data:image/png;base64,@@@"})
    assert response.status_code == 400
    assert models.calls == []

    response = await client.post("/ai/suggest-category", json={"imageData": PNG_DATA_URL})
    assert response.json()["category"] == "Metal"
