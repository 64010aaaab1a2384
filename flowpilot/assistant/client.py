"""
Text Generator Client - Thin wrapper around the Google Gemini API
"""

from functools import lru_cache
from typing import Optional
import logging

from google import genai

from flowpilot.core.config import settings
from flowpilot.assistant.exceptions import GenerationError

logger = logging.getLogger(__name__)

class GeminiTextGenerator:
    """
    Sends a prompt to Gemini and returns the response text.

    The SDK client is created on first use so the app starts without an API key;
    requests then fail with GenerationError until one is configured.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self._client = None

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise GenerationError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        logger.info(f"➡️  Sending prompt to {self.model} ({len(prompt)} chars)")
        try:
            response = self.client.models.generate_content(model=self.model, contents=prompt)
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"❌ Gemini request failed: {str(e)}", exc_info=True)
            raise GenerationError(f"Gemini request failed: {str(e)}") from e

        text = (response.text or "").strip()
        if not text:
            logger.warning("⚠️  Gemini returned an empty response")
            raise GenerationError("Empty response from Gemini")

        logger.info(f"✅ Received {len(text)} chars from {self.model}")
        return text

@lru_cache()
def get_text_generator() -> GeminiTextGenerator:
    """FastAPI dependency; tests override it with a fake generator"""
    return GeminiTextGenerator()
