"""Gemini adapter built on the google-genai SDK."""

from __future__ import annotations

import logging

from google import genai
from google.genai import errors as genai_errors
from google.genai import types
import httpx

from visitscribe.adapters.generation.base import GenerationOptions, TextGenerator
from visitscribe.errors import GenerationError

logger = logging.getLogger(__name__)


class GeminiTextGenerator(TextGenerator):
    def __init__(self, api_key: str | None, model: str) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required for the gemini llm provider")
        self._client = genai.Client(api_key=api_key)
        self._model = model

    def generate(self, prompt: str, options: GenerationOptions) -> str:
        config = types.GenerateContentConfig(
            temperature=options.temperature,
            top_p=options.top_p,
            max_output_tokens=options.max_output_tokens,
            response_mime_type="application/json" if options.structured_output else "text/plain",
        )
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise GenerationError(f"{type(exc).__name__}: {exc}") from exc

        text = response.text or ""
        if not text:
            logger.warning("generation.empty_response model=%s", self._model)
        return text


__all__ = ["GeminiTextGenerator"]
