"""Pydantic models for quizzes, questions, attempts and invitations.

JSON uses camelCase (``correctAnswers``, ``createdBy``); Python code uses
snake_case. The model validators re-enforce the same invariants as
``quizcraft.services.quiz.validator`` so a model instance is always valid.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from quizcraft.services.quiz.validator import (
    DEFAULT_QUESTION_COUNT,
    MAX_QUESTION_COUNT,
    MAX_TITLE_LENGTH,
    MIN_CORRECT_ANSWERS_MULTIPLE,
    MIN_OPTIONS,
)

QuestionType = Literal["single", "multiple"]
Difficulty = Literal["easy", "medium", "hard"]
Level = Literal["school", "undergrad", "postgrad"]
CreatedBy = Literal["manual", "ai"]
InvitationStatus = Literal["pending", "accepted", "rejected", "completed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Dump with camelCase keys, the shape callers and prompts use."""
        return self.model_dump(mode="json", by_alias=True)


# ── Quiz content ──────────────────────────────────────────


class Question(_CamelModel):
    text: str
    options: List[str] = Field(min_length=MIN_OPTIONS)
    correct_answers: List[str] = Field(min_length=1)
    type: QuestionType

    @field_validator("text", mode="after")
    @classmethod
    def _strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Question text cannot be empty")
        return v

    @field_validator("options", "correct_answers", mode="after")
    @classmethod
    def _strip_items(cls, v: List[str]) -> List[str]:
        v = [item.strip() for item in v]
        if not all(v):
            raise ValueError("Options and answers cannot be empty")
        return v

    @model_validator(mode="after")
    def _check_answers(self) -> "Question":
        if self.type == "single" and len(self.correct_answers) != 1:
            raise ValueError("Single-choice questions must have exactly one correct answer")
        if self.type == "multiple" and len(self.correct_answers) < MIN_CORRECT_ANSWERS_MULTIPLE:
            raise ValueError(
                f"Multiple-choice questions need at least {MIN_CORRECT_ANSWERS_MULTIPLE} correct answers"
            )
        missing = [a for a in self.correct_answers if a not in self.options]
        if missing:
            raise ValueError(f"Correct answers must be included in the options array: {missing}")
        return self


class AttemptAnswer(_CamelModel):
    question_index: int = Field(ge=0)
    selected_options: List[str] = Field(default_factory=list)
    is_correct: bool


class Attempt(_CamelModel):
    student: str
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    answers: List[AttemptAnswer] = Field(default_factory=list)
    completed_at: datetime = Field(default_factory=_utcnow)

    @computed_field  # type: ignore[misc]
    @property
    def percentage(self) -> int:
        if self.max_score == 0:
            return 0
        return round(self.score / self.max_score * 100)


class Quiz(_CamelModel):
    title: str = Field(max_length=MAX_TITLE_LENGTH)
    difficulty: Difficulty
    level: Level
    questions: List[Question] = Field(min_length=1)
    created_by: CreatedBy = "manual"
    owner_id: Optional[str] = None
    invited_students: List[str] = Field(default_factory=list)
    attempts: List[Attempt] = Field(default_factory=list)
    is_active: bool = True
    time_limit: int = Field(default=0, ge=0)  # minutes, 0 means no limit

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Title cannot be empty")
        return v

    @computed_field  # type: ignore[misc]
    @property
    def question_count(self) -> int:
        return len(self.questions)

    @computed_field  # type: ignore[misc]
    @property
    def average_score(self) -> float:
        if not self.attempts:
            return 0
        return sum(a.score for a in self.attempts) / len(self.attempts)


class Invitation(_CamelModel):
    quiz: str
    teacher: str
    student: str
    status: InvitationStatus = "pending"
    invited_at: datetime = Field(default_factory=_utcnow)
    response_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


# ── Service requests / results ────────────────────────────

def _clean_topic(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Topic cannot be empty")
    return v


class GenerationRequest(_CamelModel):
    topic: str = Field(min_length=1)
    difficulty: Difficulty
    level: Level
    question_count: int = Field(default=DEFAULT_QUESTION_COUNT, ge=1, le=MAX_QUESTION_COUNT)

    @field_validator("topic", mode="after")
    @classmethod
    def _strip_topic(cls, v: str) -> str:
        return _clean_topic(v)


class QuizParams(_CamelModel):
    topic: Optional[str] = None
    title: Optional[str] = None
    difficulty: Difficulty
    level: Level

    @model_validator(mode="after")
    def _needs_subject(self) -> "QuizParams":
        if not (self.topic or self.title):
            raise ValueError("Either topic or title is required")
        return self

    @property
    def subject(self) -> str:
        return self.title or self.topic or ""


class VerificationResult(_CamelModel):
    is_correct: bool
    feedback: str = ""
    suggestions: List[str] = Field(default_factory=list)


class RegenerationRequest(_CamelModel):
    topic: str = Field(min_length=1)
    difficulty: Difficulty
    level: Level
    # 0-based; booleans are not indices
    indices_to_regenerate: List[StrictInt] = Field(min_length=1)
    current_questions: List[Question] = Field(min_length=1)

    @field_validator("topic", mode="after")
    @classmethod
    def _strip_topic(cls, v: str) -> str:
        return _clean_topic(v)
