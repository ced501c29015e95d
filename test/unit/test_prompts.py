"""
Unit tests for backend/quizcraft/prompts/__init__.py
Tests: placeholder substitution, determinism, verify/edit variants,
per-slot type requirements in the regeneration prompt
"""

import sys
import os
import pytest

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "backend"))
sys.path.insert(0, BACKEND_DIR)

from quizcraft.prompts import (
    get_quiz_prompt,
    get_regenerate_prompt,
    get_verify_prompt,
    type_requirement,
)
from quizcraft.services.quiz.models import Question, QuizParams


class TestQuizPrompt:

    def test_contains_request_parameters(self):
        prompt = get_quiz_prompt("Photosynthesis", "medium", "undergrad", 7)
        assert '"Photosynthesis"' in prompt
        assert "exactly 7 questions" in prompt
        assert "Difficulty level: medium" in prompt
        assert "Academic level: undergrad" in prompt

    def test_states_format_rules(self):
        prompt = get_quiz_prompt("Photosynthesis", "medium", "undergrad", 7)
        assert "exactly 4 options" in prompt
        assert "About 70% of questions should be single-choice" in prompt
        assert "correctAnswers" in prompt

    def test_no_placeholders_left(self):
        assert "{{" not in get_quiz_prompt("T", "easy", "school", 1)

    def test_rendering_is_deterministic(self):
        a = get_quiz_prompt("Rivers", "hard", "postgrad", 3)
        b = get_quiz_prompt("Rivers", "hard", "postgrad", 3)
        assert a == b


class TestVerifyPrompt:

    def _params(self, **kw):
        data = {"topic": "Chemistry", "difficulty": "easy", "level": "school"}
        data.update(kw)
        return QuizParams(**data)

    def _question(self):
        return Question(text="H2O is?", options=["Water", "Salt"], correct_answers=["Water"], type="single")

    def test_single_question_variant(self):
        prompt = get_verify_prompt(self._question(), self._params())
        assert "QUESTION TO VERIFY:" in prompt
        assert "ORIGINAL QUESTION" not in prompt
        assert '"correctAnswers"' in prompt
        assert 'topic: "Chemistry"' in prompt

    def test_edit_variant_shows_both(self):
        original = {"text": "H2O?", "options": ["Water", "Salt"], "correctAnswers": ["Water"], "type": "single"}
        prompt = get_verify_prompt(self._question(), self._params(), original_question=original)
        assert "ORIGINAL QUESTION:" in prompt
        assert "EDITED QUESTION:" in prompt
        assert prompt.index("ORIGINAL QUESTION:") < prompt.index("EDITED QUESTION:")

    def test_title_preferred_over_topic(self):
        prompt = get_verify_prompt(self._question(), self._params(title="Intro Chem Quiz"))
        assert 'topic: "Intro Chem Quiz"' in prompt

    def test_asks_for_verdict_keys(self):
        prompt = get_verify_prompt(self._question(), self._params())
        assert '"isCorrect"' in prompt
        assert '"feedback"' in prompt
        assert '"suggestions"' in prompt


class TestRegeneratePrompt:

    def test_type_requirement_lines(self):
        assert type_requirement(1, "single") == "Question 1: Single choice (1 correct answer)"
        assert type_requirement(2, "multiple") == "Question 2: Multiple choice (1-4 correct answers)"

    def test_requirements_follow_slot_order(self):
        prompt = get_regenerate_prompt("Volcanoes", "hard", "school", ["single", "multiple"])
        first = prompt.index("Question 1: Single choice (1 correct answer)")
        second = prompt.index("Question 2: Multiple choice (1-4 correct answers)")
        assert first < second
        assert "Generate 2 quiz questions" in prompt

    @pytest.mark.parametrize("types", [["single"], ["multiple", "multiple", "single"]])
    def test_no_placeholders_left(self, types):
        assert "{{" not in get_regenerate_prompt("T", "easy", "school", types)
