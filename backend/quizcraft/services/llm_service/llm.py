"""LLM provider factory with timeout and token limits.

Usage:
    from quizcraft.core.config import settings
    from quizcraft.core.llm_config import LLMConfig
    from quizcraft.services.llm_service.llm import build_llm

    config = LLMConfig.from_settings(settings)

    # For quiz / question generation (higher temperature)
    llm = build_llm(config, mode="generation")

    # For question verification (lower temperature, shorter replies)
    llm = build_llm(config, mode="verification")

    reply = await llm.ainvoke("Hello")
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import httpx
import requests
from langchain_core.language_models.llms import LLM
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_nvidia_ai_endpoints import ChatNVIDIA
from langchain_ollama import ChatOllama

from quizcraft.core.llm_config import LLMConfig

logger = logging.getLogger(__name__)

MODES = ("generation", "verification")

# ── LLM instance cache (keyed on the frozen config + mode) ────
_llm_cache: Dict[tuple, Any] = {}
_LLM_CACHE_MAX = 16


# ── Builder functions ─────────────────────────────────────────


def _generation_params(config: LLMConfig, mode: str) -> tuple:
    if mode == "verification":
        return config.temperature_verification, config.max_tokens_verification
    return config.temperature_generation, config.max_tokens_generation


def _common_kwargs(config: LLMConfig, mode: str) -> dict:
    """Shared kwargs for all providers with explicit generation control."""
    temperature, max_tokens = _generation_params(config, mode)
    return {
        "model": config.model,
        "temperature": temperature,
        "top_p": config.top_p,
        "timeout": config.timeout,
        "max_tokens": max_tokens,
    }


def _build_google(config: LLMConfig, mode: str):
    """Build Google Gemini client with generation parameters."""
    kw = _common_kwargs(config, mode)
    kw["max_output_tokens"] = kw.pop("max_tokens")
    kw["google_api_key"] = config.api_key
    return ChatGoogleGenerativeAI(**kw)


def _build_ollama(config: LLMConfig, mode: str):
    """Build Ollama client with generation parameters."""
    kw = _common_kwargs(config, mode)
    kw["num_predict"] = kw.pop("max_tokens")
    kw.pop("timeout")
    if config.api_url:
        kw["base_url"] = config.api_url
    return ChatOllama(**kw)


def _build_nvidia(config: LLMConfig, mode: str):
    """Build NVIDIA client with generation parameters."""
    kw = _common_kwargs(config, mode)
    kw.pop("timeout")
    kw["api_key"] = config.api_key
    return ChatNVIDIA(**kw)


def _build_http(config: LLMConfig, mode: str):
    """Build the plain REST text-generation client."""
    temperature, max_tokens = _generation_params(config, mode)
    if not config.api_url:
        raise ValueError("HTTP provider requires api_url")
    return HttpTextLLM(
        api_url=config.api_url,
        model_name=config.model,
        temperature=temperature,
        max_tokens=max_tokens,
        request_timeout=config.timeout,
    )


_PROVIDERS = {
    "GOOGLE": _build_google,
    "OLLAMA": _build_ollama,
    "NVIDIA": _build_nvidia,
    "HTTP": _build_http,
}


# ── Public API ────────────────────────────────────────────────


def build_llm(config: LLMConfig, mode: str = "generation"):
    """Return a LangChain-compatible model for *config*.

    Args:
        config: Explicit provider/model/credentials/generation settings.
        mode: "generation" (quiz and regenerate prompts) or
              "verification" (question critique).

    Returns:
        Object exposing ``ainvoke(prompt)``.
    """
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")

    builder = _PROVIDERS.get(config.provider.upper())
    if builder is None:
        raise ValueError(f"Unknown LLM provider {config.provider!r}")

    cache_key = (config, mode)
    cached = _llm_cache.get(cache_key)
    if cached is not None:
        return cached

    logger.info("Building %s client for model %s (%s)", config.provider, config.model, mode)
    instance = builder(config, mode)
    if len(_llm_cache) >= _LLM_CACHE_MAX:
        _llm_cache.pop(next(iter(_llm_cache)))
    _llm_cache[cache_key] = instance
    return instance


def clear_llm_cache() -> None:
    _llm_cache.clear()


# ── Plain REST wrapper ────────────────────────────────────────


class HttpTextLLM(LLM):
    """LangChain wrapper for a JSON REST text-generation endpoint.

    Request: ``{"message", "model", "temperature", "max_tokens"}``.
    Response: ``{"data": {"response": "<text>"}}``.
    """

    api_url: str
    model_name: str = "default"
    temperature: float = 0.7
    max_tokens: int = 2048
    request_timeout: float = 30.0

    @property
    def _llm_type(self) -> str:
        return "http_text"

    def _build_payload(self, prompt: str) -> dict:
        return {
            "message": prompt,
            "model": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    @staticmethod
    def _extract(body: Any) -> str:
        try:
            return body["data"]["response"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Unexpected response shape from text endpoint: {body!r:.200}") from exc

    def _call(
        self, prompt: str, stop: Optional[List[str]] = None, *args: Any, **kwargs: Any
    ) -> str:
        start = time.monotonic()
        resp = requests.post(
            self.api_url,
            json=self._build_payload(prompt),
            headers={"Content-Type": "application/json"},
            timeout=self.request_timeout,
        )
        resp.raise_for_status()
        logger.debug("Text endpoint answered %d in %.2fs", resp.status_code, time.monotonic() - start)
        return self._extract(resp.json())

    async def _acall(
        self, prompt: str, stop: Optional[List[str]] = None, *args: Any, **kwargs: Any
    ) -> str:
        """Async version using httpx for true non-blocking IO."""
        start = asyncio.get_running_loop().time()
        async with httpx.AsyncClient(timeout=self.request_timeout) as client:
            resp = await client.post(
                self.api_url,
                json=self._build_payload(prompt),
                headers={"Content-Type": "application/json"},
            )
            resp.raise_for_status()
        logger.debug(
            "Text endpoint answered %d in %.2fs",
            resp.status_code, asyncio.get_running_loop().time() - start,
        )
        return self._extract(resp.json())
