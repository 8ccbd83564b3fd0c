from __future__ import annotations

import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from worklog.ai import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OLLAMA_MODEL,
    GeminiProvider,
    OllamaProvider,
    build_provider,
)
from worklog.config import Config
from worklog.errors import ConfigurationError, UpstreamError


class GeminiProviderTests(unittest.TestCase):
    def test_requires_api_key(self) -> None:
        provider = GeminiProvider(api_key="  ")
        self.assertFalse(provider.is_configured())
        with self.assertRaises(ConfigurationError):
            provider.generate("prompt")

    @patch("worklog.ai.genai")
    def test_generate_returns_text(self, genai) -> None:
        genai.GenerativeModel.return_value.generate_content.return_value.text = "  Weekly recap  "
        provider = GeminiProvider(api_key="secret", model="gemini-test")

        self.assertEqual(provider.generate("Summarize"), "Weekly recap")
        genai.configure.assert_called_once_with(api_key="secret")
        genai.GenerativeModel.assert_called_once_with("gemini-test")
        genai.GenerativeModel.return_value.generate_content.assert_called_once_with("Summarize")

    @patch("worklog.ai.genai")
    def test_client_errors_become_upstream_errors(self, genai) -> None:
        genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota exceeded")
        with self.assertRaises(UpstreamError):
            GeminiProvider(api_key="secret").generate("Summarize")

    @patch("worklog.ai.genai")
    def test_empty_text_is_upstream_error(self, genai) -> None:
        genai.GenerativeModel.return_value.generate_content.return_value.text = ""
        with self.assertRaises(UpstreamError):
            GeminiProvider(api_key="secret").generate("Summarize")

    def test_default_model(self) -> None:
        self.assertEqual(GeminiProvider(api_key="k", model="").model, DEFAULT_GEMINI_MODEL)


class OllamaProviderTests(unittest.TestCase):
    @patch("worklog.ai.requests.post")
    def test_generate_posts_prompt(self, post) -> None:
        post.return_value = MagicMock(status_code=200)
        post.return_value.json.return_value = {"response": " Done. "}
        provider = OllamaProvider(base_url="http://ollama:11434/", model="llama3")

        self.assertEqual(provider.generate("Summarize"), "Done.")
        args, kwargs = post.call_args
        self.assertEqual(args[0], "http://ollama:11434/api/generate")
        self.assertEqual(kwargs["json"], {"model": "llama3", "prompt": "Summarize", "stream": False})

    @patch("worklog.ai.requests.post")
    def test_connection_error(self, post) -> None:
        post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(UpstreamError):
            OllamaProvider().generate("Summarize")

    @patch("worklog.ai.requests.post")
    def test_http_error_status(self, post) -> None:
        post.return_value = MagicMock(status_code=500, text="model not found")
        with self.assertRaises(UpstreamError):
            OllamaProvider().generate("Summarize")

    @patch("worklog.ai.requests.post")
    def test_missing_response_text(self, post) -> None:
        post.return_value = MagicMock(status_code=200)
        post.return_value.json.return_value = {"done": True}
        with self.assertRaises(UpstreamError):
            OllamaProvider().generate("Summarize")

    def test_needs_no_credential(self) -> None:
        self.assertTrue(OllamaProvider().is_configured())


class BuildProviderTests(unittest.TestCase):
    def test_selects_provider_by_name(self) -> None:
        gemini = build_provider(Config(data_dir=Path("."), provider="gemini", api_key="k"))
        self.assertIsInstance(gemini, GeminiProvider)
        self.assertEqual(gemini.model, DEFAULT_GEMINI_MODEL)

        ollama = build_provider(Config(data_dir=Path("."), provider="ollama", ollama_base_url="http://host:1"))
        self.assertIsInstance(ollama, OllamaProvider)
        self.assertEqual(ollama.base_url, "http://host:1")
        self.assertEqual(ollama.model, DEFAULT_OLLAMA_MODEL)

    def test_unknown_provider(self) -> None:
        with self.assertRaises(ConfigurationError):
            build_provider(Config(data_dir=Path("."), provider="carrier-pigeon"))


if __name__ == "__main__":
    unittest.main()
