"""Client for the external text-generation service."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import TypeAdapter, ValidationError

from app.schemas import Insight, InsightLevel
from settings import get_settings

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 4

FALLBACK_INSIGHTS: tuple[Insight, ...] = (
    Insight(
        level=InsightLevel.critical,
        title="Error Generating Insights",
        description=(
            "Could not connect to the AI model to generate insights. The summary may "
            "have been too complex or an API error occurred."
        ),
        recommendation=(
            "Check the API key and network connection, or try a different data file."
        ),
    ),
    Insight(
        level=InsightLevel.warning,
        title="Data Parsed Locally",
        description=(
            "AI insights could not be generated. The dashboard is showing metrics "
            "computed from local parsing only."
        ),
        recommendation="Refresh the insights or check the service logs for details.",
    ),
    Insight(
        level=InsightLevel.info,
        title="Local Data Available",
        description="The selected data file has been parsed successfully.",
        recommendation=(
            "Explore the charts and distributions while the AI service is unavailable."
        ),
    ),
    Insight(
        level=InsightLevel.info,
        title="File Analysis Feature",
        description=(
            "Direct questions about the file can still be asked through the analysis "
            "endpoint."
        ),
        recommendation="Ask a specific question about the data to get a direct answer.",
    ),
)

INSIGHT_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "level": {
                "type": "STRING",
                "description": "The severity of the insight.",
                "enum": [level.value for level in InsightLevel],
            },
            "title": {"type": "STRING", "description": "A short, descriptive title."},
            "description": {
                "type": "STRING",
                "description": "A detailed description of the insight (2-3 sentences).",
            },
            "recommendation": {
                "type": "STRING",
                "description": "A clear, actionable recommendation.",
            },
        },
        "required": ["level", "title", "description", "recommendation"],
    },
}

_INSIGHT_LIST = TypeAdapter(List[Insight])


class InsightServiceError(RuntimeError):
    """Raised when the text-generation service cannot produce a usable answer."""


class TextGenerator(Protocol):
    async def generate(
        self, prompt: str, response_schema: Optional[Dict[str, Any]] = None
    ) -> str:
        ...


class GeminiTextGenerator:
    """Calls the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(
        self, prompt: str, response_schema: Optional[Dict[str, Any]] = None
    ) -> str:
        if not self._api_key:
            raise InsightServiceError("INSIGHTS_API_KEY is not set.")

        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"/models/{self._model}:generateContent",
                    params={"key": self._api_key},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.InvalidURL as exc:
            raise InsightServiceError(f"Invalid text generator URL: {exc}") from exc

        try:
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise InsightServiceError("Unexpected response from text generator.") from exc


def build_analysis_prompt(file_name: str, file_content: str, question: str) -> str:
    return (
        "You are an expert data analyst.\n"
        "Analyze the following file content and respond to the user's request.\n\n"
        f"File Name: {file_name}\n\n"
        "File Content:\n---\n"
        f"{file_content}\n"
        "---\n\n"
        f'User Request: "{question}"\n\n'
        "Provide a clear, concise, and helpful analysis based on the data. "
        "Use markdown for formatting if it helps clarity."
    )


def build_insights_prompt(digest: str) -> str:
    return (
        "You are an expert data analyst for IoT sensor data.\n"
        f"Analyze the following summary of sensor data and generate exactly {MAX_INSIGHTS} "
        "diverse and actionable insights.\n"
        "The insights should cover potential issues, anomalies, or notable patterns.\n"
        "Categorize each insight with a severity level.\n\n"
        "Data Summary:\n---\n"
        f"{digest}\n"
        "---\n\n"
        f"Your response MUST be a valid JSON array of {MAX_INSIGHTS} objects. "
        "Do not wrap it in markdown."
    )


def parse_insights(text: str) -> list[Insight]:
    candidate = text.strip()
    if candidate.startswith("```"):
        candidate = candidate.strip("`")
        candidate = candidate.removeprefix("json").strip()
    try:
        payload = json.loads(candidate)
        insights = _INSIGHT_LIST.validate_python(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise InsightServiceError("Text generator returned malformed insights.") from exc
    if not insights:
        raise InsightServiceError("Text generator returned no insights.")
    return insights[:MAX_INSIGHTS]


def fallback_insights() -> list[Insight]:
    return [insight.model_copy() for insight in FALLBACK_INSIGHTS]


class InsightService:
    """Text-generation collaborator used by the dashboard."""

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    async def analyze(self, file_name: str, file_content: str, question: str) -> str:
        """Answer a free-form question about a file."""
        prompt = build_analysis_prompt(file_name, file_content, question)
        try:
            return await self.generator.generate(prompt)
        except (httpx.HTTPError, InsightServiceError) as exc:
            logger.error(
                "File analysis failed: %s",
                exc,
                extra={"file_name": file_name, "status": "failed"},
            )
            raise InsightServiceError(
                "An error occurred while analyzing the file."
            ) from exc

    async def generate_insights(self, digest: str) -> tuple[list[Insight], bool]:
        """Return ``(insights, used_fallback)`` for a data digest."""
        try:
            text = await self.generator.generate(
                build_insights_prompt(digest), response_schema=INSIGHT_RESPONSE_SCHEMA
            )
            insights = parse_insights(text)
        except (httpx.HTTPError, InsightServiceError) as exc:
            logger.warning(
                "Falling back to placeholder insights: %s",
                exc,
                extra={"status": "fallback", "insight_count": len(FALLBACK_INSIGHTS)},
            )
            return fallback_insights(), True
        logger.info("Generated insights", extra={"insight_count": len(insights)})
        return insights, False

    async def summarize_insights(self, digest: str) -> list[Insight]:
        insights, _ = await self.generate_insights(digest)
        return insights


@lru_cache
def build_default_insight_service() -> InsightService:
    settings = get_settings()
    generator = GeminiTextGenerator(
        api_key=settings.insights_api_key,
        model=settings.insights_model,
        base_url=settings.insights_base_url,
        timeout=settings.insights_timeout,
    )
    return InsightService(generator=generator)
