"""
Unit tests for backend/quizcraft/core/config.py
Tests: Settings defaults, provider validation, key aliases, cross-field
checks, LLMConfig derivation, service imports that never read the environment
No network required.
"""

import sys
import os
import subprocess
import textwrap
import pytest
from pydantic import ValidationError as PydanticValidationError

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "backend"))
sys.path.insert(0, BACKEND_DIR)

os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")

from quizcraft.core.config import LLMConfig, Settings, get_settings, settings


def _settings(**kw):
    # Ignore any local .env so the test only sees explicit values
    return Settings(_env_file=None, **kw)


class TestSettingsDefaults:

    def test_settings_is_settings_instance(self):
        assert isinstance(settings, Settings)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_default_model(self):
        assert _settings(GOOGLE_API_KEY="k").GOOGLE_MODEL == "gemini-2.0-flash"

    def test_timeout_default(self):
        assert _settings(GOOGLE_API_KEY="k").LLM_TIMEOUT == 30

    def test_log_dir_is_absolute(self):
        assert os.path.isabs(_settings(GOOGLE_API_KEY="k").LOG_DIR)


class TestSettingsValidation:

    def test_provider_uppercased(self):
        assert _settings(LLM_PROVIDER="ollama").LLM_PROVIDER == "OLLAMA"

    def test_unknown_provider_rejected(self):
        with pytest.raises(PydanticValidationError):
            _settings(LLM_PROVIDER="openai")

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(PydanticValidationError):
            _settings(LLM_TIMEOUT=0, GOOGLE_API_KEY="k")

    def test_gemini_key_alias(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert _settings().GOOGLE_API_KEY == "gemini-key"

    def test_missing_key_in_production_rejected(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        with pytest.raises(PydanticValidationError):
            _settings(ENVIRONMENT="production", LLM_PROVIDER="GOOGLE")

    def test_missing_key_in_development_allowed(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert _settings(LLM_PROVIDER="GOOGLE").GOOGLE_API_KEY == ""


class TestLLMConfig:

    def test_from_google_settings(self):
        config = LLMConfig.from_settings(_settings(GOOGLE_API_KEY="k", LLM_TIMEOUT=12))
        assert config.provider == "GOOGLE"
        assert config.model == "gemini-2.0-flash"
        assert config.api_key == "k"
        assert config.timeout == 12

    def test_from_http_settings(self):
        config = LLMConfig.from_settings(
            _settings(LLM_PROVIDER="HTTP", HTTP_LLM_API_URL="http://llm.local/api/chat")
        )
        assert config.api_url == "http://llm.local/api/chat"
        assert config.api_key == ""

    def test_frozen_and_hashable(self):
        config = LLMConfig(api_key="k")
        with pytest.raises(PydanticValidationError):
            config.timeout = 5
        assert hash(config) == hash(LLMConfig(api_key="k"))

    def test_timeout_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            LLMConfig(timeout=0)


# A bad production environment must not break importing or building the service.
_IMPORT_SERVICE = textwrap.dedent("""
    import sys
    from quizcraft.core.llm_config import LLMConfig
    from quizcraft.services.quiz.generator import QuizGenerationService

    assert "quizcraft.core.config" not in sys.modules
    QuizGenerationService(LLMConfig(api_key="k"))
""")


def test_service_import_ignores_environment():
    env = {k: v for k, v in os.environ.items() if k != "GEMINI_API_KEY"}
    env.update(ENVIRONMENT="production", GOOGLE_API_KEY="", PYTHONPATH=BACKEND_DIR)
    result = subprocess.run(
        [sys.executable, "-c", _IMPORT_SERVICE],
        cwd=BACKEND_DIR, env=env, capture_output=True, text=True,
    )
    assert result.returncode == 0, result.stderr
