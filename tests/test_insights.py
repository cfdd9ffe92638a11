"""Unit tests for the text-generation client and insight fallback."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

import httpx
import pytest

from app.schemas import InsightLevel
from services.insights import (
    FALLBACK_INSIGHTS,
    GeminiTextGenerator,
    InsightService,
    InsightServiceError,
    parse_insights,
)


def _insight(index: int, level: str = "info") -> Dict[str, str]:
    return {
        "level": level,
        "title": f"Insight {index}",
        "description": "Something notable happened.",
        "recommendation": "Keep an eye on it.",
    }


def _gemini_payload(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _service(handler, api_key: str | None = "secret") -> InsightService:
    generator = GeminiTextGenerator(
        api_key=api_key,
        model="test-model",
        base_url="https://llm.test/v1beta",
        transport=httpx.MockTransport(handler),
    )
    return InsightService(generator=generator)


def test_generate_insights_parses_and_truncates_to_four() -> None:
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = json.dumps([_insight(i, "warning") for i in range(5)])
        return httpx.Response(200, json=_gemini_payload(body))

    insights, used_fallback = asyncio.run(_service(handler).generate_insights("digest text"))

    assert used_fallback is False
    assert len(insights) == 4
    assert all(insight.level is InsightLevel.warning for insight in insights)

    request = requests[0]
    assert request.url.path == "/v1beta/models/test-model:generateContent"
    assert request.url.params["key"] == "secret"
    payload = json.loads(request.content)
    assert "digest text" in payload["contents"][0]["parts"][0]["text"]
    assert payload["generationConfig"]["responseMimeType"] == "application/json"


def test_generate_insights_falls_back_on_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "boom"}})

    insights, used_fallback = asyncio.run(_service(handler).generate_insights("digest"))

    assert used_fallback is True
    assert [insight.level for insight in insights] == [
        InsightLevel.critical,
        InsightLevel.warning,
        InsightLevel.info,
        InsightLevel.info,
    ]
    assert [insight.title for insight in insights] == [item.title for item in FALLBACK_INSIGHTS]


def test_generate_insights_falls_back_on_malformed_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_payload("definitely not json"))

    insights = asyncio.run(_service(handler).summarize_insights("digest"))

    assert len(insights) == 4
    assert insights[0].level is InsightLevel.critical


def test_generate_insights_falls_back_on_unexpected_envelope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    _, used_fallback = asyncio.run(_service(handler).generate_insights("digest"))

    assert used_fallback is True


def test_missing_api_key_uses_fallback_without_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not run
        raise AssertionError("No request expected without an API key")

    _, used_fallback = asyncio.run(_service(handler, api_key=None).generate_insights("digest"))

    assert used_fallback is True


def test_invalid_base_url_uses_fallback_and_fails_analysis() -> None:
    generator = GeminiTextGenerator(
        api_key="secret", model="test-model", base_url="https://llm\x07.test/v1beta"
    )
    service = InsightService(generator=generator)

    insights, used_fallback = asyncio.run(service.generate_insights("digest"))

    assert used_fallback is True
    assert len(insights) == len(FALLBACK_INSIGHTS)
    with pytest.raises(InsightServiceError):
        asyncio.run(service.analyze("data.csv", "", "anything"))


def test_analyze_returns_generated_text() -> None:
    prompts: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        prompts.append(payload["contents"][0]["parts"][0]["text"])
        assert "generationConfig" not in payload
        return httpx.Response(200, json=_gemini_payload("Average temperature was 21°C."))

    answer = asyncio.run(
        _service(handler).analyze("data.csv", "timestamp,temp\n", "What was the average?")
    )

    assert answer == "Average temperature was 21°C."
    assert "File Name: data.csv" in prompts[0]
    assert 'User Request: "What was the average?"' in prompts[0]


def test_analyze_raises_service_error_on_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with pytest.raises(InsightServiceError):
        asyncio.run(_service(handler).analyze("data.csv", "", "anything"))


def test_parse_insights_accepts_fenced_json() -> None:
    text = "```json\n" + json.dumps([_insight(1, "critical")]) + "\n```"

    insights = parse_insights(text)

    assert len(insights) == 1
    assert insights[0].level is InsightLevel.critical


def test_parse_insights_rejects_unknown_level_and_empty_lists() -> None:
    with pytest.raises(InsightServiceError):
        parse_insights(json.dumps([_insight(1, "urgent")]))
    with pytest.raises(InsightServiceError):
        parse_insights("[]")
