"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses
- Single source of truth for all configurable values

A missing API key is NOT fatal at startup: the dashboard still renders,
and each LLM adapter raises ConfigurationError when it is actually used.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _api_key_from_env() -> str:
    return (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()


@dataclass(frozen=True)
class LLMSettings:
    """Gemini settings shared by the analysis and chat adapters."""

    api_key: str = field(default_factory=_api_key_from_env)
    api_base: str = field(
        default_factory=lambda: os.getenv(
            "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/")
    )

    model: str = field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-3-pro-preview"))
    chat_model: str = field(default_factory=lambda: os.getenv("GEMINI_CHAT_MODEL", ""))

    # Deep reasoning for the one-shot analysis, a lighter budget for chat turns
    analysis_thinking_budget: int = 32768
    chat_thinking_budget: int = 4096

    # Reviews beyond this many characters are dropped before the request
    max_input_chars: int = field(default_factory=lambda: _env_int("MAX_INPUT_CHARS", 50000))

    timeout_seconds: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT_SECONDS", 120))

    @property
    def effective_chat_model(self) -> str:
        return self.chat_model or self.model


@dataclass(frozen=True)
class ServerSettings:
    """Uvicorn settings for the web dashboard."""

    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _env_int("PORT", 8000))
    reload: bool = field(default_factory=lambda: _env_bool("RELOAD"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info").lower())


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from sentient.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.llm.model)
    """

    llm: LLMSettings = field(default_factory=LLMSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.llm.api_key:
            issues.append(
                "WARNING: GEMINI_API_KEY (or API_KEY) not set. "
                "Analysis and chat requests will fail until it is configured."
            )

        if self.llm.max_input_chars <= 0:
            issues.append(
                f"WARNING: MAX_INPUT_CHARS={self.llm.max_input_chars} leaves no room for reviews."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
