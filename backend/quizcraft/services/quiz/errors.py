"""Error taxonomy for quiz generation, validation and authoring.

Every error carries the HTTP status the API layer should answer with and a
short machine-readable ``code``. The wrapper errors (``GenerationError``,
``RegenerationError``) keep the stage that failed as ``cause`` so the status
mapping follows the real failure.
"""

from __future__ import annotations

from typing import Optional


class QuizError(Exception):
    """Base class for every error raised by the quiz services."""

    status_code: int = 500
    code: str = "QUIZ_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "details": self.message}


class ExtractionError(QuizError):
    """No JSON-shaped substring found in the model reply."""

    status_code = 502
    code = "EXTRACTION_FAILED"


class ParseError(QuizError):
    """A JSON-shaped substring was found but it is not valid JSON."""

    status_code = 502
    code = "PARSE_FAILED"


class ValidationError(QuizError):
    """A quiz or question violates a structural invariant."""

    status_code = 400
    code = "VALIDATION_FAILED"

    def __init__(self, message: str, question_index: Optional[int] = None):
        super().__init__(message)
        # 1-based, matches the message text
        self.question_index = question_index

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.question_index is not None:
            payload["question_index"] = self.question_index
        return payload


class ModelCallError(QuizError):
    """The text-generation endpoint failed or returned nothing usable."""

    status_code = 502
    code = "MODEL_CALL_FAILED"


class ModelTimeoutError(ModelCallError):
    """The text-generation endpoint did not answer within the timeout."""

    status_code = 504
    code = "MODEL_TIMEOUT"


class _WrappedError(QuizError):
    def __init__(self, message: str, cause: Optional[QuizError] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.status_code = cause.status_code

    @property
    def cause_code(self) -> Optional[str]:
        return self.cause.code if self.cause is not None else None

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.cause is not None:
            payload["cause"] = self.cause.to_dict()
        return payload


class GenerationError(_WrappedError):
    """``generate_quiz`` failed at some stage of the pipeline."""

    code = "GENERATION_FAILED"


class RegenerationError(_WrappedError):
    """``regenerate_questions`` failed at some stage of the pipeline."""

    code = "REGENERATION_FAILED"


class InvitationError(QuizError):
    """An invitation request is not allowed in the current state."""

    status_code = 400
    code = "INVITATION_INVALID"

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
