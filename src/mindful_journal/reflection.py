"""Reflection generation for journal entries.

Uses Google Gemini via the google-genai SDK.  Availability is decided
up front from configuration: without the SDK or an API key the
generator reports itself unconfigured and the editor never offers it.
"""

from __future__ import annotations

import logging

from mindful_journal.config import ReflectionConfig
from mindful_journal.errors import GenerationError, ReflectionUnavailable
from mindful_journal.models import Mood
from mindful_journal.prompts import build_reflection_prompt

logger = logging.getLogger(__name__)

# Optional dependency
try:
    from google import genai
    from google.genai import types

    _HAS_GENAI = True
except ImportError:
    genai = None  # type: ignore[assignment]
    types = None  # type: ignore[assignment]
    _HAS_GENAI = False

EMPTY_RESPONSE_TEXT = "I couldn't generate a reflection at this moment."


class ReflectionGenerator:
    """Generate short reflections on journal entries via Google Gemini."""

    def __init__(self, config: ReflectionConfig) -> None:
        self._config = config
        self._client: object | None = None

    def is_configured(self) -> bool:
        """Check whether reflection generation is available and configured."""
        return _HAS_GENAI and self._config.is_configured

    def _get_client(self) -> object:
        """Lazy-create and cache the genai Client."""
        if self._client is None:
            self._client = genai.Client(api_key=self._config.api_key)  # type: ignore[union-attr]
        return self._client

    def generate(self, title: str, content: str, mood: Mood | str) -> str:
        """Return a reflection on the given entry text.

        Args:
            title: Entry title (may be empty).
            content: Entry body.
            mood: The mood the user tagged the entry with.

        Returns:
            The reflection text, or a fixed fallback line if the model
            returned nothing.

        Raises:
            ReflectionUnavailable: If the generator is not configured.
            GenerationError: If the API call fails.
        """
        if not self.is_configured():
            raise ReflectionUnavailable("API key not configured")

        prompt = build_reflection_prompt(title, content, mood)
        logger.debug("Requesting reflection model=%s", self._config.model)

        try:
            client = self._get_client()
            response = client.models.generate_content(  # type: ignore[union-attr]
                model=self._config.model,
                contents=prompt,
                config=types.GenerateContentConfig(  # type: ignore[union-attr]
                    thinking_config=types.ThinkingConfig(  # type: ignore[union-attr]
                        thinking_budget=self._config.thinking_budget,
                    ),
                ),
            )
        except Exception as exc:
            logger.warning("Reflection request failed", exc_info=True)
            raise GenerationError("Failed to generate insight.") from exc

        text = (response.text or "").strip()
        return text or EMPTY_RESPONSE_TEXT
