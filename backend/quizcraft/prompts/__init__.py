"""Prompt template loader.

Each ``get_*_prompt`` function loads a ``.txt`` template from this
package directory and substitutes placeholders. Rendering is pure: the same
arguments always give the same prompt text.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Dict, Optional, Sequence

from quizcraft.services.quiz.validator import AI_OPTION_COUNT, MIN_CORRECT_ANSWERS_MULTIPLE

_DIR = os.path.dirname(__file__)

# Share of single-choice questions asked for in a generated quiz
SINGLE_CHOICE_SHARE = 70
MULTIPLE_RANGE = f"{MIN_CORRECT_ANSWERS_MULTIPLE}-{AI_OPTION_COUNT}"


@lru_cache(maxsize=32)
def _load(filename: str) -> str:
    """Read a template file, caching the result."""
    with open(os.path.join(_DIR, filename), encoding="utf-8") as f:
        return f.read()


def _render(filename: str, subs: Dict[str, str]) -> str:
    """Load *filename* and apply all substitutions."""
    text = _load(filename)
    for key, val in subs.items():
        text = text.replace(key, val)
    return text


def _as_json(question: Any) -> str:
    if hasattr(question, "to_json_dict"):
        question = question.to_json_dict()
    return json.dumps(question, indent=2, ensure_ascii=False)


def type_requirement(position: int, question_type: str) -> str:
    if question_type == "single":
        return f"Question {position}: Single choice (1 correct answer)"
    return f"Question {position}: Multiple choice ({MULTIPLE_RANGE} correct answers)"


# ── Public helpers ────────────────────────────────────────


def get_quiz_prompt(topic: str, difficulty: str, level: str, question_count: int) -> str:
    return _render("quiz_prompt.txt", {
        "{{TOPIC}}": topic,
        "{{QUESTION_COUNT}}": str(question_count),
        "{{DIFFICULTY}}": difficulty,
        "{{LEVEL}}": level,
        "{{SINGLE_SHARE}}": str(SINGLE_CHOICE_SHARE),
        "{{MULTIPLE_SHARE}}": str(100 - SINGLE_CHOICE_SHARE),
        "{{MULTIPLE_RANGE}}": MULTIPLE_RANGE,
    })


def get_verify_prompt(
    question: Any,
    quiz_params: Any,
    original_question: Optional[Any] = None,
) -> str:
    """Critique prompt for one question, or for an edit when *original_question* is given."""
    if original_question is not None:
        block = (
            f"ORIGINAL QUESTION:\n{_as_json(original_question)}\n\n"
            f"EDITED QUESTION:\n{_as_json(question)}\n\n"
            "Your task is to determine if the edited question is valid and correct."
        )
    else:
        block = (
            f"QUESTION TO VERIFY:\n{_as_json(question)}\n\n"
            "Your task is to determine if this question is valid, factually accurate, "
            "and has correctly marked answer(s)."
        )
    return _render("verify_prompt.txt", {
        "{{SUBJECT}}": quiz_params.subject,
        "{{DIFFICULTY}}": quiz_params.difficulty,
        "{{LEVEL}}": quiz_params.level,
        "{{QUESTION_BLOCK}}": block,
    })


def get_regenerate_prompt(
    topic: str, difficulty: str, level: str, question_types: Sequence[str],
) -> str:
    requirements = "\n".join(
        type_requirement(i, qtype) for i, qtype in enumerate(question_types, start=1)
    )
    return _render("regenerate_prompt.txt", {
        "{{TOPIC}}": topic,
        "{{QUESTION_COUNT}}": str(len(question_types)),
        "{{DIFFICULTY}}": difficulty,
        "{{LEVEL}}": level,
        "{{TYPE_REQUIREMENTS}}": requirements,
    })
