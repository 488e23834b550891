"""Integration helpers for the OpenRouter API."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import InferenceUnavailableError
from ..models import Artifact

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are SceneSleuth, an AI that recognises movies, series and anime from "
    "screenshots and from descriptions of what a viewer is in the mood for. "
    "You always respond with a single JSON object that matches the documented "
    "schema and never include commentary outside JSON."
)

RESPONSE_SCHEMA = """
{
  "isAnime": true,
  "detectedTitle": "exact title if recognised, otherwise null",
  "characters": ["character names"],
  "genre": "anime|live-action|animation|unknown",
  "confidence": 0.85,
  "keywords": ["search terms to find this content"],
  "similarTitles": ["related movies or shows"],
  "detectedMood": "mood name or null",
  "description": "what you see or understand"
}
"""

IMAGE_REQUEST_TEMPLATE = """
Analyse this image carefully and decide whether it shows content from a movie, TV show or anime.
Pay special attention to:
1. Japanese anime/manga art style (distinctive character designs, big eyes, stylised features).
2. Specific anime series such as Demon Slayer, Naruto, One Piece or Attack on Titan.
3. Character weapons, clothing and settings.
4. Animation style versus live action.

If you recognise the content, identify the exact title, recognisable characters,
the genre and visual style. Set "confidence" between 0 and 1.

Respond strictly with JSON following this structure:
{schema}
"""

TEXT_REQUEST_TEMPLATE = """
A viewer described what they want to watch:
"{text}"

1. Identify the primary mood or theme and how confident you are (0 to 1).
2. If the description names or clearly points at a specific title, put it in "detectedTitle".
3. Provide search keywords (genres, themes) and up to three fitting titles in "similarTitles".

Respond strictly with JSON following this structure:
{schema}
"""

# Descriptions longer than this are truncated before prompting.
MAX_PROMPT_TEXT = 1_000


class OpenRouterClient:
    """Client responsible for sending artifacts to a vision-capable model."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def configured(self) -> bool:
        return self._settings.inference_configured

    async def analyze(self, artifact: Artifact) -> str:
        """Return the model's raw text answer for ``artifact``."""

        api_key = self._settings.openrouter_api_key
        if not api_key:
            raise InferenceUnavailableError("OpenRouter API key is not configured")

        payload = {
            "model": self._settings.openrouter_model,
            "temperature": 0.3,
            "max_output_tokens": 1_024,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self._build_user_content(artifact)},
            ],
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/scenesleuth/scenesleuth",
            "X-Title": "SceneSleuth",
        }

        try:
            response = await self._client.post(
                "/chat/completions", json=payload, headers=headers
            )
        except httpx.HTTPError as exc:
            raise InferenceUnavailableError(f"OpenRouter request failed: {exc}") from exc
        if response.status_code >= 400:
            raise InferenceUnavailableError(
                f"OpenRouter returned HTTP {response.status_code}: {response.text}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise InferenceUnavailableError("OpenRouter returned a non-JSON body") from exc
        choices = data.get("choices", []) if isinstance(data, dict) else []
        if not choices:
            raise InferenceUnavailableError("Model returned no choices")
        message = choices[0].get("message", {}) or {}
        content = message.get("content")
        if isinstance(content, list):
            # Some providers return content parts instead of a plain string.
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        if not isinstance(content, str):
            raise InferenceUnavailableError("Model response missing content")
        logger.debug("OpenRouter raw response for %s: %s", artifact.describe(), content)
        return content

    def _build_user_content(self, artifact: Artifact) -> Any:
        if artifact.is_image:
            encoded = base64.b64encode(artifact.content).decode("ascii")
            data_url = f"data:{artifact.media_type};base64,{encoded}"
            return [
                {
                    "type": "text",
                    "text": IMAGE_REQUEST_TEMPLATE.format(schema=RESPONSE_SCHEMA),
                },
                {"type": "image_url", "image_url": {"url": data_url}},
            ]

        text = (artifact.text or "").strip()[:MAX_PROMPT_TEXT]
        return TEXT_REQUEST_TEMPLATE.format(
            text=text.replace('"', "'"), schema=RESPONSE_SCHEMA
        )
