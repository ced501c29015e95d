"""Explicit model configuration handed to the generation service.

Kept apart from ``config.py`` so that importing the services never builds
the environment-backed ``Settings`` singleton.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from quizcraft.core.config import Settings


class LLMConfig(BaseModel):
    """Provider, model, credentials, timeout and sampling settings.

    Nothing downstream of this object reads the process environment, so a
    service can be built in tests from literal values.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = "GOOGLE"
    model: str = "gemini-2.0-flash"
    api_key: str = ""
    api_url: Optional[str] = None
    timeout: float = Field(default=30.0, gt=0)
    temperature_generation: float = 0.7
    temperature_verification: float = 0.2
    top_p: float = 0.95
    max_tokens_generation: int = 2048
    max_tokens_verification: int = 1024

    @classmethod
    def from_settings(cls, s: "Settings") -> "LLMConfig":
        model, api_key, api_url = {
            "GOOGLE": (s.GOOGLE_MODEL, s.GOOGLE_API_KEY, None),
            "OLLAMA": (s.OLLAMA_MODEL, "", None),
            "NVIDIA": (s.NVIDIA_MODEL, s.NVIDIA_API_KEY, None),
            "HTTP": (s.HTTP_LLM_MODEL, "", s.HTTP_LLM_API_URL),
        }[s.LLM_PROVIDER]
        return cls(
            provider=s.LLM_PROVIDER,
            model=model,
            api_key=api_key,
            api_url=api_url,
            timeout=s.LLM_TIMEOUT,
            temperature_generation=s.LLM_TEMPERATURE_GENERATION,
            temperature_verification=s.LLM_TEMPERATURE_VERIFICATION,
            top_p=s.LLM_TOP_P,
            max_tokens_generation=s.LLM_MAX_TOKENS_GENERATION,
            max_tokens_verification=s.LLM_MAX_TOKENS_VERIFICATION,
        )
