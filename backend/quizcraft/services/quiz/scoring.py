"""Grading quiz attempts."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping, Optional

from quizcraft.services.quiz.errors import ValidationError
from quizcraft.services.quiz.models import Attempt, AttemptAnswer, Question, Quiz

logger = logging.getLogger(__name__)


def grade_answer(question: Question, selected_options: Iterable[str]) -> bool:
    """An answer is correct when exactly the correct options are selected."""
    return set(selected_options) == set(question.correct_answers)


def score_attempt(
    quiz: Quiz,
    student: str,
    selections: Mapping[int, Iterable[str]],
    completed_at: Optional[datetime] = None,
) -> Attempt:
    """Grade a student's selections (0-based question index -> chosen options).

    Unanswered questions count as wrong.
    """
    unknown = [i for i in selections if not 0 <= i < len(quiz.questions)]
    if unknown:
        raise ValidationError(f"Answers reference unknown questions: {sorted(unknown)}")

    answers = []
    for index, question in enumerate(quiz.questions):
        selected = list(selections.get(index, []))
        stray = [o for o in selected if o not in question.options]
        if stray:
            raise ValidationError(
                f'Question {index + 1} has a selected option "{stray[0]}" that is not in the options',
                index + 1,
            )
        answers.append(AttemptAnswer(
            question_index=index,
            selected_options=selected,
            is_correct=bool(selected) and grade_answer(question, selected),
        ))

    score = sum(1 for a in answers if a.is_correct)
    extra = {"completed_at": completed_at} if completed_at is not None else {}
    attempt = Attempt(
        student=student,
        score=score,
        max_score=len(quiz.questions),
        answers=answers,
        **extra,
    )
    logger.info("Scored attempt by %s on %r: %d/%d", student, quiz.title, score, attempt.max_score)
    return attempt


def record_attempt(quiz: Quiz, attempt: Attempt) -> Quiz:
    """Return a copy of *quiz* with *attempt* appended."""
    return quiz.model_copy(update={"attempts": [*quiz.attempts, attempt]})
