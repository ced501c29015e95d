"""Quiz generation, question verification and question regeneration.

``QuizGenerationService`` is built from an explicit ``LLMConfig``; it never
reads the environment. Each public operation comes in two forms:

- ``try_*`` returns a ``GenerationOutcome`` (ok / extraction_failed /
  parse_failed / validation_failed / model_failed) and never raises for
  pipeline failures;
- the plain form raises ``GenerationError`` / ``RegenerationError``.

``verify_question`` is the exception: a failed critique must not block the
editing workflow, so it always returns a ``VerificationResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from quizcraft.core.llm_config import LLMConfig
from quizcraft.prompts import get_quiz_prompt, get_regenerate_prompt, get_verify_prompt
from quizcraft.services.llm_service.llm import build_llm
from quizcraft.services.llm_service.structured_invoker import invoke_text, parse_json_block
from quizcraft.services.quiz.authoring import build_ai_quiz, in_range_indices
from quizcraft.services.quiz.errors import (
    ExtractionError,
    GenerationError,
    ModelCallError,
    ParseError,
    QuizError,
    RegenerationError,
    ValidationError,
)
from quizcraft.services.quiz.models import (
    GenerationRequest,
    Question,
    Quiz,
    QuizParams,
    RegenerationRequest,
    VerificationResult,
)
from quizcraft.services.quiz.parser import (
    normalize_verification,
    parse_quiz_response,
    parse_regenerated_questions,
    verification_fallback,
)
from quizcraft.services.quiz.validator import DEFAULT_QUESTION_COUNT, count_types

logger = logging.getLogger(__name__)

T = TypeVar("T")

REGENERATION_FAILED_MESSAGE = "Failed to generate new questions. Please try again."

_STATUS_BY_ERROR = (
    (ExtractionError, "extraction_failed"),
    (ParseError, "parse_failed"),
    (ValidationError, "validation_failed"),
    (ModelCallError, "model_failed"),
)


@dataclass(frozen=True)
class GenerationOutcome(Generic[T]):
    """Tagged result of a generation step."""

    status: str
    value: Optional[T] = None
    error: Optional[QuizError] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def reason(self) -> Optional[str]:
        return self.error.message if self.error is not None else None

    @property
    def question_index(self) -> Optional[int]:
        return getattr(self.error, "question_index", None)

    @classmethod
    def success(cls, value: T) -> "GenerationOutcome[T]":
        return cls(status="ok", value=value)

    @classmethod
    def failure(cls, error: QuizError) -> "GenerationOutcome[T]":
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(error, error_type):
                return cls(status=status, error=error)
        return cls(status="failed", error=error)


def _invalid_input(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    where = ".".join(str(p) for p in first.get("loc", ())) or "request"
    return ValidationError(f"{where}: {first.get('msg', 'invalid value')}")


class QuizGenerationService:
    """Generation pipeline around one text-generation model.

    Args:
        config: Provider, model, credentials, timeout and sampling settings.
        llm: Optional pre-built model used for every call (tests inject fakes
             here). Anything with ``async ainvoke(prompt)`` works.
        verify_llm: Optional model for verification; defaults to *llm*.
    """

    def __init__(self, config: LLMConfig, llm: Any = None, verify_llm: Any = None):
        self.config = config
        self._llm = llm
        self._verify_llm = verify_llm if verify_llm is not None else llm

    def _model(self, mode: str) -> Any:
        injected = self._verify_llm if mode == "verification" else self._llm
        if injected is not None:
            return injected
        try:
            return build_llm(self.config, mode)
        except Exception as exc:
            logger.error("Could not build %s client: %s", self.config.provider, exc)
            raise ModelCallError(f"Could not build LLM client: {exc}") from exc

    # ── Quiz generation ──────────────────────────────────

    async def try_generate_quiz(
        self,
        topic: str,
        difficulty: str,
        level: str,
        question_count: int = DEFAULT_QUESTION_COUNT,
        owner_id: Optional[str] = None,
    ) -> GenerationOutcome[Quiz]:
        try:
            request = GenerationRequest(
                topic=topic, difficulty=difficulty, level=level, question_count=question_count,
            )
        except PydanticValidationError as exc:
            return GenerationOutcome.failure(_invalid_input(exc))

        logger.info(
            "Generating quiz: topic=%r difficulty=%s level=%s count=%d",
            request.topic, request.difficulty, request.level, request.question_count,
        )
        prompt = get_quiz_prompt(request.topic, request.difficulty, request.level, request.question_count)
        try:
            text = await invoke_text(self._model("generation"), prompt, self.config.timeout)
            parsed = parse_quiz_response(text, request.topic, request.difficulty, request.level)
            quiz = build_ai_quiz(parsed, owner_id=owner_id)
        except QuizError as exc:
            logger.warning("Quiz generation failed (%s): %s", exc.code, exc.message)
            return GenerationOutcome.failure(exc)

        if quiz.question_count != request.question_count:
            logger.warning(
                "Model returned %d questions, %d were requested",
                quiz.question_count, request.question_count,
            )
        logger.info("Generated quiz %r %s", quiz.title, count_types(parsed["questions"]))
        return GenerationOutcome.success(quiz)

    async def generate_quiz(
        self,
        topic: str,
        difficulty: str,
        level: str,
        question_count: int = DEFAULT_QUESTION_COUNT,
        owner_id: Optional[str] = None,
    ) -> Quiz:
        """Generate and validate a quiz.

        Raises:
            GenerationError: wraps the extraction, parse, validation or model
                failure (``error.cause``).
        """
        outcome = await self.try_generate_quiz(topic, difficulty, level, question_count, owner_id)
        if not outcome.ok:
            raise GenerationError(f"Failed to generate quiz: {outcome.reason}", outcome.error)
        return outcome.value

    # ── Verification ─────────────────────────────────────

    async def verify_question(
        self,
        question: Union[Question, Mapping[str, Any]],
        original_question: Optional[Union[Question, Mapping[str, Any]]] = None,
        *,
        quiz_params: Union[QuizParams, Mapping[str, Any]],
    ) -> VerificationResult:
        """Ask the model to critique *question* (or an edit of *original_question*).

        Model and reply failures return the fallback result instead of
        raising. Malformed *quiz_params* still raise ``ValidationError``.
        """
        if not isinstance(quiz_params, QuizParams):
            try:
                quiz_params = QuizParams.model_validate(quiz_params)
            except PydanticValidationError as exc:
                raise _invalid_input(exc) from exc

        prompt = get_verify_prompt(question, quiz_params, original_question)
        try:
            text = await invoke_text(self._model("verification"), prompt, self.config.timeout)
            data = parse_json_block(text, "object")
            result = VerificationResult.model_validate(normalize_verification(data))
        except QuizError as exc:
            logger.warning("Question verification fell back (%s): %s", exc.code, exc.message)
            return VerificationResult.model_validate(verification_fallback())
        except PydanticValidationError as exc:
            logger.warning("Verification reply had an unexpected shape: %s", exc)
            return VerificationResult.model_validate(verification_fallback())

        logger.info("Question verified: is_correct=%s", result.is_correct)
        return result

    # ── Regeneration ─────────────────────────────────────

    async def try_regenerate_questions(
        self,
        topic: str,
        difficulty: str,
        level: str,
        indices_to_regenerate: Sequence[int],
        current_questions: Sequence[Union[Question, Mapping[str, Any]]],
    ) -> GenerationOutcome[List[Question]]:
        try:
            request = RegenerationRequest(
                topic=topic,
                difficulty=difficulty,
                level=level,
                indices_to_regenerate=list(indices_to_regenerate),
                current_questions=list(current_questions),
            )
        except PydanticValidationError as exc:
            return GenerationOutcome.failure(_invalid_input(exc))

        slots = in_range_indices(request.indices_to_regenerate, len(request.current_questions))
        if not slots:
            return GenerationOutcome.failure(ValidationError("No valid question indices to regenerate"))

        types = [request.current_questions[i].type for i in slots]
        logger.info("Regenerating questions at indices %s (%s)", slots, types)
        prompt = get_regenerate_prompt(request.topic, request.difficulty, request.level, types)
        try:
            text = await invoke_text(self._model("generation"), prompt, self.config.timeout)
            raw = parse_regenerated_questions(text)
            if len(raw) != len(types):
                raise ValidationError(f"Expected {len(types)} regenerated questions, got {len(raw)}")
            for i, (question, wanted) in enumerate(zip(raw, types), start=1):
                if question["type"] != wanted:
                    raise ValidationError(
                        f"Regenerated question {i} has type {question['type']!r}, expected {wanted!r}", i,
                    )
            questions = [Question.model_validate(q) for q in raw]
        except QuizError as exc:
            logger.warning("Question regeneration failed (%s): %s", exc.code, exc.message)
            return GenerationOutcome.failure(exc)
        except PydanticValidationError as exc:
            return GenerationOutcome.failure(_invalid_input(exc))

        return GenerationOutcome.success(questions)

    async def regenerate_questions(
        self,
        topic: str,
        difficulty: str,
        level: str,
        indices_to_regenerate: Sequence[int],
        current_questions: Sequence[Union[Question, Mapping[str, Any]]],
    ) -> List[Question]:
        """Ask for replacement questions, one per in-range index, keeping each slot's type.

        Raises:
            RegenerationError: any extraction, parse, validation or model failure.
        """
        outcome = await self.try_regenerate_questions(
            topic, difficulty, level, indices_to_regenerate, current_questions,
        )
        if not outcome.ok:
            raise RegenerationError(REGENERATION_FAILED_MESSAGE, outcome.error)
        return outcome.value
