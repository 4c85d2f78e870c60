"""
LLM Service Module for Phish-Lens

This module handles communication with the text-generation services that
perform the actual analysis: a local Ollama server or the Gemini API.

Each call is attempted once. Any failure (connection, timeout, HTTP error,
unexpected response body) raises UpstreamFailure; retrying is left to the
user, since every request costs model time or API quota.
"""

from typing import Dict, Optional

import requests

from error_handling import ErrorCategory, UpstreamFailure, error_handler


class TextGenerationService:
    """Base class for services that turn a prompt into reply text"""

    name = "text-generation"

    def __init__(self, model: str, timeout: int = 90):
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """
        Send one prompt and return the reply text.

        Raises:
            UpstreamFailure: the service could not produce a reply
        """
        raise NotImplementedError

    def _post_json(self, url: str, payload: Dict, headers: Optional[Dict] = None) -> Dict:
        """POST a JSON payload and return the decoded JSON body"""
        try:
            with requests.Session() as session:
                response = session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise UpstreamFailure(
                f"{self.name} request timed out after {self.timeout}s",
                category=ErrorCategory.NETWORK_TIMEOUT,
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise UpstreamFailure(
                f"Cannot connect to {self.name}",
                category=ErrorCategory.SERVICE_CONNECTION,
            ) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamFailure(f"{self.name} request error: {e}") from e

        if response.status_code != 200:
            raise UpstreamFailure(
                f"{self.name} request failed (HTTP {response.status_code})",
                details=response.text[:500],
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFailure(f"{self.name} returned a non-JSON response") from e


class OllamaService(TextGenerationService):
    """
    Service for a local Ollama server (/api/generate, non-streaming).
    """

    name = "Ollama"

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "phi4-mini",
                 timeout: int = 90, temperature: float = 0.2):
        super().__init__(model, timeout)
        self.base_url = base_url.rstrip('/')
        self.temperature = temperature

    def generate(self, prompt: str) -> str:
        request_data = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.temperature,
            }
        }

        result = self._post_json(f"{self.base_url}/api/generate", request_data)

        text = result.get("response") if isinstance(result, dict) else None
        if not isinstance(text, str):
            raise UpstreamFailure("Ollama response did not contain reply text")
        return text

    def test_connection(self) -> Dict:
        """Test connection to Ollama and model availability"""
        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=10)
        except requests.exceptions.RequestException as e:
            error_info = error_handler.handle_error(
                e, "Ollama connection test", ErrorCategory.SERVICE_CONNECTION
            )
            return {"connected": False, "error": str(e), "error_details": error_info}

        if response.status_code != 200:
            return {"connected": False, "error": f"HTTP {response.status_code}"}

        try:
            models = response.json().get("models", [])
        except ValueError:
            models = []
        model_names = [model.get("name", "") for model in models]
        model_available = any(self.model in name for name in model_names)

        if not model_available and model_names:
            error_handler.logger.warning(
                f"Model '{self.model}' not found. Available: {', '.join(model_names[:3])}"
            )

        return {
            "connected": True,
            "model_available": model_available,
            "available_models": model_names,
            "health_status": "healthy" if model_available else "degraded"
        }


class GeminiService(TextGenerationService):
    """
    Service for the Google Gemini generateContent REST endpoint.
    """

    name = "Gemini"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", timeout: int = 90):
        super().__init__(model, timeout)
        self.api_key = api_key

    def generate(self, prompt: str) -> str:
        request_data = {
            "contents": [
                {"parts": [{"text": prompt}]}
            ]
        }

        result = self._post_json(
            f"{self.base_url}/models/{self.model}:generateContent",
            request_data,
            headers={"x-goog-api-key": self.api_key},
        )
        return self._extract_text(result)

    def _extract_text(self, result: Dict) -> str:
        """Concatenate the text parts of the first candidate"""
        try:
            parts = result["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise UpstreamFailure("Gemini response did not contain reply text") from e

        if not text:
            raise UpstreamFailure("Gemini returned an empty reply")
        return text
