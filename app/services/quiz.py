from __future__ import annotations

from typing import List, Optional, Sequence

import structlog

from app.models import GradeResult, QuizQuestion
from app.services.fallbacks import QUIZ_BANK

logger = structlog.get_logger()

CORRECT_SCORE = 10


def generate_quiz(topics: Optional[Sequence[str]] = None, count: int = 5) -> List[QuizQuestion]:
    """Questions on the requested topics, or the whole bank when none match"""
    wanted = {t.lower().strip() for t in topics or [] if t and t.strip()}
    questions = [q for q in QUIZ_BANK if q.topic in wanted] or list(QUIZ_BANK)
    return questions[:max(0, count)]


def find_question(question_id: str) -> Optional[QuizQuestion]:
    return next((q for q in QUIZ_BANK if q.id == question_id), None)


def grade_answer(question_id: str, user_answer: str) -> GradeResult:
    question = find_question(question_id)
    if question is None:
        logger.info("quiz_question_not_found", question_id=question_id)
        return GradeResult(correct=False, explanation="Question not found", new_score=0)

    correct = (user_answer or "").strip().lower() == question.answer.strip().lower()
    return GradeResult(
        correct=correct,
        explanation=question.explanation,
        new_score=CORRECT_SCORE if correct else 0,
    )
