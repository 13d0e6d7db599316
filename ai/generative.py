import json
import logging
from typing import Any, Dict, Optional

import requests

from config import Config

logger = logging.getLogger(__name__)


class GenerativeApiError(Exception):
    """Raised when the generative-language endpoint gives no usable text."""


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse the JSON object embedded in free-form model output.

    Takes everything from the first '{' to the last '}' so that prose or
    markdown fences around the object are ignored. Returns None when there
    is no such span, it is not valid JSON, or it is not an object.
    """
    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        parsed = json.loads(text[start:end + 1])
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class GenerativeLanguageClient:
    """Thin wrapper over the Google AI Studio generateContent endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else Config.GOOGLE_AI_STUDIO_API_KEY
        self.model = model or Config.GEMINI_MODEL
        self.api_base = (api_base or Config.GEMINI_API_BASE).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT
        self.generation_config = {
            "temperature": Config.GEMINI_TEMPERATURE,
            "topK": Config.GEMINI_TOP_K,
            "topP": Config.GEMINI_TOP_P,
            "maxOutputTokens": Config.GEMINI_MAX_TOKENS,
        }

    @property
    def url(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": dict(self.generation_config),
        }

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the generated text of the first candidate."""
        try:
            response = self.session.post(
                self.url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=self.build_payload(prompt),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GenerativeApiError(f"Request to generative endpoint failed: {e}") from e

        if not response.ok:
            raise GenerativeApiError(f"Generative endpoint returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise GenerativeApiError("Generative endpoint returned a non-JSON body") from e

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerativeApiError("No response from AI service") from e

        if not isinstance(text, str):
            raise GenerativeApiError("No response from AI service")
        logger.debug("Generative endpoint returned %d characters", len(text))
        return text
