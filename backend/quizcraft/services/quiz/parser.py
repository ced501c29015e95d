"""Turn model replies into quiz / question / verification payloads."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from quizcraft.services.llm_service.structured_invoker import parse_json_block
from quizcraft.services.quiz.validator import (
    AI_OPTION_COUNT,
    validate_quiz_structure,
    validate_regenerated_questions,
)

logger = logging.getLogger(__name__)

VERIFICATION_FALLBACK_FEEDBACK = (
    "Failed to validate the question due to a technical issue. "
    "Try again or proceed with your own judgment."
)
VERIFICATION_FALLBACK_SUGGESTIONS = ["Try again with a simpler question structure."]


def default_title(topic: str, difficulty: str) -> str:
    return f"Quiz on {topic} ({difficulty} level)"


def parse_quiz_response(text: str, topic: str, difficulty: str, level: str) -> Dict[str, Any]:
    """Parse a quiz reply, merge request metadata and validate it.

    Raises:
        ExtractionError, ParseError, ValidationError
    """
    data = parse_json_block(text, "object")
    quiz = {**data, "difficulty": difficulty, "level": level, "createdBy": "ai"}

    title = quiz.get("title")
    if not isinstance(title, str) or not title.strip():
        quiz["title"] = default_title(topic, difficulty)

    validate_quiz_structure(quiz, exact_options=AI_OPTION_COUNT)
    logger.debug("Parsed quiz %r with %d questions", quiz["title"], len(quiz["questions"]))
    return quiz


def parse_regenerated_questions(text: str) -> List[Dict[str, Any]]:
    """Parse a JSON array of replacement questions and validate each one.

    Raises:
        ExtractionError, ParseError, ValidationError
    """
    questions = parse_json_block(text, "array")
    return validate_regenerated_questions(questions)


def normalize_verification(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map legacy keys (``isValid``, ``explanation``) and default ``suggestions``."""
    result = dict(data)
    if "isValid" in result and "isCorrect" not in result:
        result["isCorrect"] = result.pop("isValid")
    else:
        result.pop("isValid", None)

    if not result.get("feedback") and result.get("explanation"):
        result["feedback"] = result.pop("explanation")
    else:
        result.pop("explanation", None)

    suggestions = result.get("suggestions")
    if not suggestions:
        result["suggestions"] = []
    elif isinstance(suggestions, list):
        result["suggestions"] = [str(s) for s in suggestions]
    else:
        result["suggestions"] = [str(suggestions)]

    verdict = result.get("isCorrect", False)
    if isinstance(verdict, str):
        verdict = verdict.strip().lower() == "true"
    result["isCorrect"] = bool(verdict)
    if not isinstance(result.get("feedback"), str):
        result["feedback"] = "" if result.get("feedback") is None else str(result["feedback"])
    return result


def verification_fallback() -> Dict[str, Any]:
    return {
        "isCorrect": False,
        "feedback": VERIFICATION_FALLBACK_FEEDBACK,
        "suggestions": list(VERIFICATION_FALLBACK_SUGGESTIONS),
    }
