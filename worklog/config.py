"""
Application configuration.

Values come from the environment and may be overridden by settings saved in
the work log store from the settings view. A non-empty stored setting wins
over the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from .paths import data_directory, log_path

PROVIDER_SETTING_KEY = "ai_provider"
MODEL_SETTING_KEY = "ai_model"
API_KEY_SETTING_KEY = "ai_api_key"
OLLAMA_URL_SETTING_KEY = "ollama_base_url"

_SETTING_FIELDS = {
    PROVIDER_SETTING_KEY: "provider",
    MODEL_SETTING_KEY: "model",
    API_KEY_SETTING_KEY: "api_key",
    OLLAMA_URL_SETTING_KEY: "ollama_base_url",
}


@dataclass(frozen=True)
class Config:
    data_dir: Path = field(default_factory=data_directory)
    provider: str = "gemini"
    model: str = ""
    api_key: str = field(default="", repr=False)
    ollama_base_url: str = "http://localhost:11434"
    log_level: str = "INFO"
    log_file: Path | None = None

    @classmethod
    def from_env(cls, data_dir: Path | None = None) -> Config:
        resolved_dir = Path(data_dir) if data_dir else data_directory()
        return cls(
            data_dir=resolved_dir,
            provider=os.getenv("WORKLOG_PROVIDER", "gemini").strip().lower() or "gemini",
            model=os.getenv("WORKLOG_MODEL", "").strip(),
            api_key=(os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip(),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip(),
            log_level=os.getenv("WORKLOG_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            log_file=log_path(resolved_dir),
        )

    def with_settings(self, store) -> Config:
        overrides: dict[str, str] = {}
        for key, attr in _SETTING_FIELDS.items():
            value = (store.get_setting(key) or "").strip()
            if value:
                overrides[attr] = value.lower() if attr == "provider" else value
        return replace(self, **overrides)

    def save_settings(self, store) -> None:
        for key, attr in _SETTING_FIELDS.items():
            store.set_setting(key, str(getattr(self, attr) or ""))
