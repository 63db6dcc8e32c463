"""
Gemini Client - Thin REST Wrapper
=================================

ARCHITECTURAL DECISION:
- Talks to the Gemini `generateContent` endpoint with plain `requests`
- Knows nothing about reviews or dashboards; callers build the contents
- Single attempt per call: no retries, no backoff
- Each call is a standalone requests.post; no connection state is shared
  between the threadpool workers running analysis and chat

Both the analysis adapter and the chat adapter go through this class, so
tests can replace it with a stub that returns canned text.
"""

import logging
from typing import Any, Optional

import requests

from ..config import LLMSettings, get_settings
from .errors import ConfigurationError, FormatError, ProviderError

logger = logging.getLogger(__name__)


def user_turn(text: str) -> dict:
    return {"role": "user", "parts": [{"text": text}]}


def model_turn(text: str) -> dict:
    return {"role": "model", "parts": [{"text": text}]}


class GeminiClient:
    """
    Minimal Gemini REST client.

    USAGE:
        client = GeminiClient()
        text = client.generate_content(
            model="gemini-3-pro-preview",
            contents=[user_turn("Hello")],
        )
    """

    def __init__(self, settings: Optional[LLMSettings] = None):
        self._settings = settings or get_settings().llm

    @property
    def settings(self) -> LLMSettings:
        return self._settings

    def require_credentials(self) -> None:
        """Raise ConfigurationError if no API key is configured."""
        if not self._settings.api_key:
            raise ConfigurationError("API Key not found")

    def generate_content(
        self,
        model: str,
        contents: list[dict],
        system_instruction: Optional[str] = None,
        generation_config: Optional[dict] = None,
    ) -> str:
        """
        Run one generateContent call.

        Returns:
            Concatenated text of the first candidate (thought parts skipped).

        Raises:
            ConfigurationError: No API key.
            ProviderError: Transport failure, non-2xx status, or blocked prompt.
            FormatError: Body is not a JSON object.
        """
        self.require_credentials()

        url = f"{self._settings.api_base}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self._settings.api_key,
            "Content-Type": "application/json",
        }

        payload: dict[str, Any] = {"contents": contents}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config

        try:
            response = requests.post(
                url,
                headers=headers,
                json=payload,
                timeout=self._settings.timeout_seconds,
            )
        except requests.Timeout as e:
            raise ProviderError(f"Gemini request timed out after {self._settings.timeout_seconds}s") from e
        except requests.RequestException as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        if not response.ok:
            raise ProviderError(
                f"Gemini returned HTTP {response.status_code}: {self._error_message(response)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FormatError("Gemini response body is not JSON") from e

        if not isinstance(data, dict):
            raise FormatError(f"Gemini response body is a {type(data).__name__}, not an object")

        return self._extract_text(data)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return response.reason

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Extract text content from API response."""
        feedback = data.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise ProviderError(f"Prompt blocked: {feedback['blockReason']}")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return ""

        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""

        return "".join(
            str(part.get("text", "")) for part in parts
            if isinstance(part, dict) and not part.get("thought")
        ).strip()
