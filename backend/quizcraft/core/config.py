"""
Centralized application configuration.

Uses pydantic BaseSettings for automatic env-var loading and validation.
Import the singleton ``settings`` instance at the edges of the app and hand
an explicit ``LLMConfig`` (``quizcraft.core.llm_config``, re-exported here)
to the services that talk to the model.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from quizcraft.core.llm_config import LLMConfig  # noqa: F401

# Resolve project root once; relative paths resolve from here
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

_VALID_PROVIDERS = {"GOOGLE", "OLLAMA", "NVIDIA", "HTTP"}

_log = logging.getLogger("config")


class Settings(BaseSettings):
    """Application settings, validated from environment variables."""

    # ── Environment ────────────────────────────────────────
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False

    # ── LLM ───────────────────────────────────────────────
    LLM_PROVIDER: str = "GOOGLE"  # GOOGLE, OLLAMA, NVIDIA, HTTP
    GOOGLE_MODEL: str = "gemini-2.0-flash"
    GOOGLE_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("GOOGLE_API_KEY", "GEMINI_API_KEY"),
    )
    OLLAMA_MODEL: str = "llama3"
    NVIDIA_MODEL: str = "meta/llama-3.1-70b-instruct"
    NVIDIA_API_KEY: str = ""
    HTTP_LLM_MODEL: str = "default"
    HTTP_LLM_API_URL: str = "http://localhost:8080/api/chat"
    LLM_TIMEOUT: int = 30

    # ── LLM Generation Control ───────────────────────────
    LLM_TEMPERATURE_GENERATION: float = 0.7
    LLM_TEMPERATURE_VERIFICATION: float = 0.2
    LLM_TOP_P: float = 0.95
    LLM_MAX_TOKENS_GENERATION: int = 2048
    LLM_MAX_TOKENS_VERIFICATION: int = 1024

    # ── Logging ───────────────────────────────────────────
    LOG_DIR: str = "./logs"
    LOG_LEVEL: str = "INFO"  # DEBUG=true forces DEBUG

    @field_validator("LLM_PROVIDER", mode="after")
    @classmethod
    def _uppercase_provider(cls, v: str) -> str:
        v = v.upper()
        if v not in _VALID_PROVIDERS:
            raise ValueError(f"LLM_PROVIDER must be one of {_VALID_PROVIDERS}, got {v!r}")
        return v

    @field_validator("LLM_TIMEOUT", mode="after")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @model_validator(mode="after")
    def _resolve_paths_and_cross_validate(self):
        """Resolve relative paths to absolute & cross-validate provider keys."""
        if self.LOG_DIR and not os.path.isabs(self.LOG_DIR):
            object.__setattr__(self, "LOG_DIR", os.path.join(_PROJECT_ROOT, self.LOG_DIR))

        missing_key = (
            (self.LLM_PROVIDER == "GOOGLE" and not self.GOOGLE_API_KEY)
            or (self.LLM_PROVIDER == "NVIDIA" and not self.NVIDIA_API_KEY)
        )
        if missing_key:
            if self.ENVIRONMENT == "production":
                raise ValueError(f"LLM_PROVIDER is {self.LLM_PROVIDER} but its API key is empty")
            _log.warning("LLM_PROVIDER is %s but its API key is empty", self.LLM_PROVIDER)

        return self

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
