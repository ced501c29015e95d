"""Structural validation of quizzes and questions.

Works on plain dicts (camelCase keys, the shape the model is asked to emit
and the shape API payloads arrive in) so it can run on untrusted data before
any model object is built. Checks fail fast and name the 1-based question
index.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from quizcraft.services.quiz.errors import ValidationError

# Generated questions always carry exactly this many options.
AI_OPTION_COUNT = 4
# Manually authored questions need at least this many options.
MIN_OPTIONS = 2
# Minimum number of correct answers on a multiple-choice question. Applied by
# create, update, generate and regenerate alike.
MIN_CORRECT_ANSWERS_MULTIPLE = 1
MAX_TITLE_LENGTH = 200
# Generation request bounds
DEFAULT_QUESTION_COUNT = 5
MAX_QUESTION_COUNT = 20

QUESTION_TYPES = ("single", "multiple")
DIFFICULTIES = ("easy", "medium", "hard")
LEVELS = ("school", "undergrad", "postgrad")


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_question(
    question: Any,
    index: int,
    exact_options: Optional[int] = AI_OPTION_COUNT,
) -> None:
    """Validate one question; ``index`` is 1-based.

    ``exact_options=None`` switches to the manual rule (at least
    ``MIN_OPTIONS`` options).
    """
    if not isinstance(question, Mapping):
        raise ValidationError(f"Question {index} must be an object", index)

    if not _is_non_empty_string(question.get("text")):
        raise ValidationError(f"Question {index} is missing text", index)

    options = question.get("options")
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise ValidationError(f"Question {index} must have a list of text options", index)
    for option in options:
        if not option.strip():
            raise ValidationError(f"Question {index} has an empty option", index)
    if exact_options is not None and len(options) != exact_options:
        raise ValidationError(f"Question {index} must have exactly {exact_options} options", index)
    if len(options) < MIN_OPTIONS:
        raise ValidationError(f"Question {index} must have at least {MIN_OPTIONS} options", index)

    correct = question.get("correctAnswers")
    if not isinstance(correct, list) or len(correct) < 1:
        raise ValidationError(f"Question {index} must have at least one correct answer", index)

    qtype = question.get("type")
    if qtype not in QUESTION_TYPES:
        raise ValidationError(f'Question {index} type must be either "single" or "multiple"', index)

    if qtype == "single" and len(correct) != 1:
        raise ValidationError(
            f"Question {index} is marked as single-choice but has {len(correct)} correct answers",
            index,
        )
    if qtype == "multiple" and len(correct) < MIN_CORRECT_ANSWERS_MULTIPLE:
        raise ValidationError(
            f"Question {index} is marked as multiple-choice but has fewer than "
            f"{MIN_CORRECT_ANSWERS_MULTIPLE} correct answers",
            index,
        )

    for answer in correct:
        if answer not in options:
            raise ValidationError(
                f'Question {index} has a correct answer "{answer}" that is not in the options',
                index,
            )


def validate_quiz_structure(quiz: Any, exact_options: Optional[int] = AI_OPTION_COUNT) -> None:
    """Validate the questions of a quiz dict. Does not modify ``quiz``."""
    if not isinstance(quiz, Mapping):
        raise ValidationError("Invalid quiz format: expected an object")

    questions = quiz.get("questions")
    if not isinstance(questions, list) or not questions:
        raise ValidationError("Invalid quiz format: Missing questions array")

    for i, question in enumerate(questions, start=1):
        validate_question(question, i, exact_options)


def validate_quiz_fields(quiz: Mapping[str, Any]) -> None:
    """Validate the quiz-level fields: title, difficulty and level."""
    title = quiz.get("title")
    if not _is_non_empty_string(title):
        raise ValidationError("Title is required")
    if len(title.strip()) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")

    if quiz.get("difficulty") not in DIFFICULTIES:
        raise ValidationError("Difficulty must be easy, medium, or hard")
    if quiz.get("level") not in LEVELS:
        raise ValidationError("Level must be school, undergrad, or postgrad")


def validate_regenerated_questions(questions: Any) -> List[Mapping[str, Any]]:
    """Validate a list of regenerated questions with the generated-quiz rules."""
    if not isinstance(questions, list) or not questions:
        raise ValidationError("Regenerated questions must be a non-empty array")
    for i, question in enumerate(questions, start=1):
        if isinstance(question, Mapping):
            missing = [f for f in ("text", "options", "correctAnswers", "type") if not question.get(f)]
            if missing:
                raise ValidationError(
                    f"Regenerated question {i} is missing required fields: {', '.join(missing)}", i
                )
        validate_question(question, i, AI_OPTION_COUNT)
    return questions


def count_types(questions: Iterable[Mapping[str, Any]]) -> dict:
    """Count single/multiple questions, e.g. for log lines."""
    counts = {t: 0 for t in QUESTION_TYPES}
    for q in questions:
        qtype = q.get("type")
        if qtype in counts:
            counts[qtype] += 1
    return counts
