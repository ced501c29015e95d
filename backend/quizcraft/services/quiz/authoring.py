"""Manual quiz authoring and edits.

Manual quizzes go through the same validator as generated ones, with the
relaxed option rule (at least two options instead of exactly four).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from quizcraft.services.quiz.errors import ValidationError
from quizcraft.services.quiz.models import Question, Quiz
from quizcraft.services.quiz.validator import (
    validate_question,
    validate_quiz_fields,
    validate_quiz_structure,
)

logger = logging.getLogger(__name__)

QuestionLike = Union[Question, Mapping[str, Any]]

# Fields a full-quiz update may change (camelCase, as sent by clients)
UPDATABLE_FIELDS = {"title", "difficulty", "level", "questions", "isActive", "timeLimit"}
_SNAKE_TO_CAMEL = {"is_active": "isActive", "time_limit": "timeLimit"}
# Fields taken from a generated quiz payload
AI_CONTENT_FIELDS = ("title", "difficulty", "level", "questions")


def _from_pydantic(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    loc = first.get("loc", ())
    question_index = None
    if len(loc) >= 2 and loc[0] == "questions" and isinstance(loc[1], int):
        question_index = loc[1] + 1
    where = ".".join(str(p) for p in loc) or "quiz"
    return ValidationError(f"{where}: {first.get('msg', 'invalid value')}", question_index)


def _build_quiz(payload: Mapping[str, Any]) -> Quiz:
    try:
        return Quiz.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise _from_pydantic(exc) from exc


def _question_dict(question: QuestionLike) -> Dict[str, Any]:
    if isinstance(question, Question):
        return question.to_json_dict()
    return dict(question)


def _quiz_payload(quiz: Quiz) -> Dict[str, Any]:
    return quiz.model_dump(by_alias=True, exclude={"question_count", "average_score"})


def create_manual_quiz(payload: Mapping[str, Any], owner_id: Optional[str] = None) -> Quiz:
    """Validate a manual-creation request and build the quiz.

    Raises:
        ValidationError: the payload violates a quiz or question invariant.
    """
    validate_quiz_fields(payload)
    validate_quiz_structure(payload, exact_options=None)
    quiz = _build_quiz({**payload, "createdBy": "manual", "ownerId": owner_id})
    logger.info("Created manual quiz %r with %d questions", quiz.title, quiz.question_count)
    return quiz


def build_ai_quiz(parsed: Mapping[str, Any], owner_id: Optional[str] = None) -> Quiz:
    """Build the quiz model from an already parsed and validated generation payload.

    Only the content fields are taken from the model output.
    """
    content = {k: parsed[k] for k in AI_CONTENT_FIELDS if k in parsed}
    return _build_quiz({**content, "createdBy": "ai", "ownerId": owner_id})


def update_quiz(quiz: Quiz, changes: Mapping[str, Any]) -> Quiz:
    """Apply a full-field update and re-validate with the manual rules."""
    normalized = {_SNAKE_TO_CAMEL.get(k, k): v for k, v in changes.items()}
    unknown = set(normalized) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    payload = {**_quiz_payload(quiz), **normalized}
    validate_quiz_fields(payload)
    validate_quiz_structure(payload, exact_options=None)
    return _build_quiz(payload)


def replace_question(quiz: Quiz, index: int, question: QuestionLike) -> Quiz:
    """Replace the question at 0-based *index* with an edited version."""
    if not 0 <= index < len(quiz.questions):
        raise ValidationError(f"Question index {index} is out of range")
    new_question = _question_dict(question)
    validate_question(new_question, index + 1, exact_options=None)

    payload = _quiz_payload(quiz)
    payload["questions"][index] = new_question
    return _build_quiz(payload)


def in_range_indices(indices: Iterable[int], question_count: int) -> List[int]:
    """Keep the indices that address an existing question, in request order.

    Booleans and repeated indices are dropped.
    """
    slots: List[int] = []
    for i in indices:
        if isinstance(i, bool) or not isinstance(i, int):
            continue
        if 0 <= i < question_count and i not in slots:
            slots.append(i)
    return slots


def apply_regenerated_questions(
    quiz: Quiz, indices: Sequence[int], new_questions: Sequence[QuestionLike],
) -> Quiz:
    """Put regenerated questions into their slots (out-of-range indices are skipped)."""
    slots = in_range_indices(indices, len(quiz.questions))
    if len(slots) != len(new_questions):
        raise ValidationError(
            f"Expected {len(slots)} regenerated questions, got {len(new_questions)}"
        )

    payload = _quiz_payload(quiz)
    for slot, question in zip(slots, new_questions):
        payload["questions"][slot] = _question_dict(question)
    return _build_quiz(payload)
