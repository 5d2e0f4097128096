"""
Unit tests for quiz generation and grading
"""
import pytest

from app.services.quiz import CORRECT_SCORE, generate_quiz, grade_answer


class TestGrading:
    def test_correct_answer(self):
        result = grade_answer("calc-1", "2x")
        assert result.correct
        assert result.new_score == CORRECT_SCORE == 10
        assert "power rule" in result.explanation

    @pytest.mark.parametrize("answer", ["2X ", "  2x", "2x\n"])
    def test_case_and_whitespace_insensitive(self, answer):
        assert grade_answer("calc-1", answer).correct

    def test_wrong_answer(self):
        result = grade_answer("alg-1", "5")
        assert not result.correct
        assert result.new_score == 0
        assert result.explanation.startswith("Subtract 5")

    def test_unknown_question(self):
        result = grade_answer("bogus-id", "anything")
        assert not result.correct
        assert result.new_score == 0
        assert result.explanation == "Question not found"


class TestQuizGeneration:
    def test_count_limits_questions(self):
        assert [q.id for q in generate_quiz([], 2)] == ["calc-1", "calc-2"]

    def test_topic_filter(self):
        assert [q.id for q in generate_quiz(["Algebra"], 5)] == ["alg-1"]

    def test_unknown_topics_return_whole_bank(self):
        assert len(generate_quiz(["history"], 10)) == 3
