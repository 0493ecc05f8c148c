from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


SUPPORTED_PROVIDERS = ("openai", "gemini")


class ConfigurationError(RuntimeError):
    """Raised when the process environment cannot run the relay."""


class Settings(BaseModel):
    """Runtime configuration resolved from environment variables."""

    api_key: Optional[str] = Field(
        default=None, alias="API_KEY", description="Key clients must send in X-API-Key"
    )
    llm_provider: str = Field(
        default="openai",
        alias="LLM_PROVIDER",
        description="Upstream completion provider: 'openai' or 'gemini'.",
    )
    openai_api_key: Optional[str] = Field(
        default=None, alias="OPENAI_API_KEY", description="OpenAI API key"
    )
    openai_model: str = Field(
        default="gpt-3.5-turbo",
        alias="OPENAI_MODEL",
        description="Chat completion model used when the provider is OpenAI.",
    )
    gemini_api_key: Optional[str] = Field(
        default=None, alias="GEMINI_API_KEY", description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        alias="GEMINI_MODEL",
        description="Generative model used when the provider is Gemini.",
    )
    llm_max_tokens: int = Field(
        default=300,
        alias="LLM_MAX_TOKENS",
        description="Maximum number of tokens generated per reply.",
    )
    llm_temperature: float = Field(
        default=0.7,
        alias="LLM_TEMPERATURE",
        description="Sampling temperature for the upstream model.",
    )
    bio_context: Optional[str] = Field(
        default=None,
        alias="BIO_CONTEXT",
        description="Biography text sent to the model as the system prompt.",
    )
    client_portfolio_url: Optional[str] = Field(
        default=None,
        alias="CLIENT_PORTFOLIO_URL",
        description="Comma-separated list of origins allowed by CORS.",
    )
    rate_limit_max: int = Field(
        default=50,
        alias="RATE_LIMIT_MAX",
        description="Requests allowed per client IP within one window.",
    )
    rate_limit_window_minutes: int = Field(
        default=15,
        alias="RATE_LIMIT_WINDOW_MINUTES",
        description="Length of the rate-limit window in minutes.",
    )
    rate_limit_storage_uri: str = Field(
        default="memory://",
        alias="RATE_LIMIT_STORAGE_URI",
        description="Storage backend for rate-limit counters (limits URI syntax).",
    )
    rate_limit_headers: bool = Field(
        default=True,
        alias="RATE_LIMIT_HEADERS",
        description="When true, X-RateLimit-* headers are added to responses.",
    )
    host: str = Field(default="0.0.0.0", alias="HOST", description="Listen host")
    port: int = Field(default=3001, alias="PORT", description="Listen port")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Root log level")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        return cls.model_validate(os.environ)

    @property
    def allowed_origins(self) -> List[str]:
        raw = self.client_portfolio_url or ""
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def rate_limit(self) -> str:
        return f"{self.rate_limit_max} per {self.rate_limit_window_minutes} minutes"

    @property
    def provider(self) -> str:
        return self.llm_provider.strip().lower()

    @property
    def upstream_api_key(self) -> Optional[str]:
        if self.provider == "gemini":
            return self.gemini_api_key
        return self.openai_api_key

    def ensure_ready(self) -> None:
        """Fail fast when a variable the relay cannot run without is missing."""
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"LLM_PROVIDER must be one of {', '.join(SUPPORTED_PROVIDERS)}; got '{self.llm_provider}'."
            )

        required = {
            "API_KEY": self.api_key,
            f"{self.provider.upper()}_API_KEY": self.upstream_api_key,
            "BIO_CONTEXT": self.bio_context,
        }
        for name, value in required.items():
            if not (value or "").strip():
                raise ConfigurationError(
                    f"{name} environment variable is not set. Server cannot start."
                )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance built from environment variables."""
    return Settings.from_env()
