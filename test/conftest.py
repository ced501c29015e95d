"""
Shared pytest fixtures and configuration for the entire test suite.
Applies to all subdirectories: unit/, e2e/
"""

import sys
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
import pytest

# ── Ensure backend is importable from every pytest session ──────────────────
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

# Minimal env so that Pydantic Settings can validate on import
os.environ.setdefault("LLM_PROVIDER", "GOOGLE")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")


# ── Sample quiz data ─────────────────────────────────────────────────────────

def make_question(text="What is 2 + 2?", qtype="single", options=None, correct=None):
    """Build a camelCase question dict with four options."""
    options = options if options is not None else ["3", "4", "5", "22"]
    if correct is None:
        correct = ["4"] if qtype == "single" else ["4", "22"]
    return {"text": text, "options": options, "correctAnswers": correct, "type": qtype}


@pytest.fixture
def sample_questions():
    return [
        make_question("Which planet is closest to the Sun?", "single",
                      ["Mercury", "Venus", "Earth", "Mars"], ["Mercury"]),
        make_question("Which planets are gas giants?", "multiple",
                      ["Jupiter", "Saturn", "Mars", "Venus"], ["Jupiter", "Saturn"]),
        make_question("How many planets are in the Solar System?", "single",
                      ["7", "8", "9", "10"], ["8"]),
    ]


@pytest.fixture
def sample_quiz_payload(sample_questions):
    return {
        "title": "Solar System Basics",
        "difficulty": "easy",
        "level": "school",
        "questions": sample_questions,
    }


@pytest.fixture
def sample_quiz(sample_quiz_payload):
    from quizcraft.services.quiz.authoring import create_manual_quiz
    return create_manual_quiz(sample_quiz_payload, owner_id="teacher-1")


# ── LLM fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def llm_config():
    from quizcraft.core.llm_config import LLMConfig
    return LLMConfig(provider="GOOGLE", model="gemini-2.0-flash", api_key="test-key", timeout=5)


@pytest.fixture
def fake_llm():
    """Return a fake chat model; set ``fake_llm.reply`` to the text it should answer."""
    llm = MagicMock()
    llm.reply = ""

    async def _ainvoke(prompt):
        llm.prompts.append(prompt)
        return SimpleNamespace(content=llm.reply)

    llm.prompts = []
    llm.ainvoke = AsyncMock(side_effect=_ainvoke)
    return llm


# ── Logging cleanup ──────────────────────────────────────────────────────────

@pytest.fixture
def clean_logging():
    """Remove handlers installed by setup_logging before and after a test."""
    from quizcraft.core.logging_config import reset_logging
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def question_factory():
    """Expose ``make_question`` to tests that build their own question dicts."""
    return make_question
