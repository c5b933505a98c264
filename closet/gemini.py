"""Gemini access: structured JSON answers and inline image generation."""

import asyncio
import json
import logging
from collections.abc import Sequence
from functools import lru_cache
from typing import Any, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from closet.config import GEMINI_API_KEY, GEMINI_IMAGE_MODEL, GEMINI_TEXT_MODEL
from closet.errors import EmptyResponseError, RetryableProviderError
from closet.media import DataUri, to_data_uri

logger = logging.getLogger(__name__)

PromptPart = str | DataUri

RETRYABLE_STATUS_CODES = frozenset({429, 503})

SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_LOW_AND_ABOVE"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_MEDIUM_AND_ABOVE"),
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_MEDIUM_AND_ABOVE"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_MEDIUM_AND_ABOVE"),
]


class ModelGateway(Protocol):
    async def generate_structured(
        self,
        parts: Sequence[PromptPart],
        output_model: type[BaseModel],
        *,
        safety: bool = False,
    ) -> dict[str, Any] | None: ...

    async def generate_media(
        self,
        parts: Sequence[PromptPart],
        *,
        modalities: Sequence[str] = ("TEXT", "IMAGE"),
        safety: bool = False,
    ) -> str | None: ...


def _extract_json(text: str) -> dict:
    """Strip markdown code fences if present, then parse JSON."""
    text = text.strip()
    if text.startswith("```"):
        text = text.removeprefix("```json").removeprefix("```").removesuffix("```")
    return json.loads(text)


def _to_content(parts: Sequence[PromptPart]) -> list:
    contents: list = []
    for part in parts:
        if isinstance(part, DataUri):
            contents.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
        else:
            contents.append(part)
    return contents


class GeminiGateway:
    """Runs prompts against Gemini through the google-genai client."""

    def __init__(
        self,
        client: genai.Client | None = None,
        *,
        text_model: str = GEMINI_TEXT_MODEL,
        image_model: str = GEMINI_IMAGE_MODEL,
    ) -> None:
        self._client = client or genai.Client(api_key=GEMINI_API_KEY)
        self._text_model = text_model
        self._image_model = image_model

    async def _generate(
        self,
        model: str,
        parts: Sequence[PromptPart],
        config: types.GenerateContentConfig,
    ) -> types.GenerateContentResponse:
        try:
            return await asyncio.to_thread(
                self._client.models.generate_content,
                model=model,
                contents=_to_content(parts),
                config=config,
            )
        except genai_errors.APIError as e:
            if e.code in RETRYABLE_STATUS_CODES:
                raise RetryableProviderError(f"Gemini API error {e.code}: {e}", status_code=e.code) from e
            raise

    async def generate_structured(
        self,
        parts: Sequence[PromptPart],
        output_model: type[BaseModel],
        *,
        safety: bool = False,
    ) -> dict[str, Any] | None:
        """Ask for JSON shaped like ``output_model``. Returns None on an empty answer."""
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=output_model,
            safety_settings=SAFETY_SETTINGS if safety else None,
        )
        response = await self._generate(self._text_model, parts, config)
        text = response.text
        if not text:
            return None
        try:
            parsed = _extract_json(text)
        except json.JSONDecodeError as e:
            logger.warning("Gemini returned malformed JSON: %.200s", text)
            raise EmptyResponseError("The model response was not valid JSON.") from e
        if not isinstance(parsed, dict):
            raise EmptyResponseError("The model response was not a JSON object.")
        return parsed

    async def generate_media(
        self,
        parts: Sequence[PromptPart],
        *,
        modalities: Sequence[str] = ("TEXT", "IMAGE"),
        safety: bool = False,
    ) -> str | None:
        """Generate an image and return it as a data URI, or None if none came back."""
        config = types.GenerateContentConfig(
            response_modalities=list(modalities),
            safety_settings=SAFETY_SETTINGS if safety else None,
        )
        response = await self._generate(self._image_model, parts, config)
        for candidate in response.candidates or []:
            content = candidate.content
            for part in (content.parts if content else None) or []:
                inline = part.inline_data
                if inline and inline.data:
                    return to_data_uri(inline.mime_type or "image/png", inline.data)
        logger.warning("Gemini image response contained no inline image")
        return None


@lru_cache(maxsize=1)
def get_gateway() -> GeminiGateway:
    return GeminiGateway()
