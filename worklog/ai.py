"""
Text-generation providers used for the weekly summary.

Each provider exposes ``generate(prompt) -> str`` and ``is_configured()``.
Any failure is reported as UpstreamError; a missing credential is a
ConfigurationError.
"""

from __future__ import annotations

import logging
from typing import Protocol

import google.generativeai as genai
import requests

from .config import Config
from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_OLLAMA_MODEL = "llama3"
DEFAULT_OLLAMA_URL = "http://localhost:11434"
PROVIDERS = ("gemini", "ollama")


class SummaryProvider(Protocol):
    name: str
    model: str

    def is_configured(self) -> bool: ...

    def generate(self, prompt: str) -> str: ...


class GeminiProvider:
    """Google Gemini via the google-generativeai client."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL):
        self.api_key = (api_key or "").strip()
        self.model = (model or "").strip() or DEFAULT_GEMINI_MODEL

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str) -> str:
        if not self.is_configured():
            raise ConfigurationError("Gemini API key is missing.")
        try:
            genai.configure(api_key=self.api_key)
            response = genai.GenerativeModel(self.model).generate_content(prompt)
            text = response.text
        except Exception as exc:  # noqa: BLE001
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamError(f"Gemini request failed: {exc}") from exc
        if not isinstance(text, str) or not text.strip():
            raise UpstreamError("Gemini response did not include text output.")
        return text.strip()


class OllamaProvider:
    """Local Ollama server; needs no credential."""

    name = "ollama"

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_URL,
        model: str = DEFAULT_OLLAMA_MODEL,
        timeout: float = 240,
    ):
        self.base_url = ((base_url or "").strip() or DEFAULT_OLLAMA_URL).rstrip("/")
        self.model = (model or "").strip() or DEFAULT_OLLAMA_MODEL
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.base_url)

    def generate(self, prompt: str) -> str:
        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json={"model": self.model, "prompt": prompt, "stream": False},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Ollama request failed: %s", exc)
            raise UpstreamError(f"Ollama request failed: {exc}") from exc

        if response.status_code != 200:
            raise UpstreamError(f"Ollama request failed ({response.status_code}): {response.text}")
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Ollama returned non-JSON response.") from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise UpstreamError("Ollama response did not include text output.")
        return text.strip()


def build_provider(config: Config) -> SummaryProvider:
    provider = (config.provider or "").strip().lower()
    if provider == "gemini":
        return GeminiProvider(api_key=config.api_key, model=config.model or DEFAULT_GEMINI_MODEL)
    if provider == "ollama":
        return OllamaProvider(base_url=config.ollama_base_url, model=config.model or DEFAULT_OLLAMA_MODEL)
    raise ConfigurationError(f"Unsupported provider: {config.provider}")
