from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TimeSlot = Literal["Morning", "Afternoon", "Evening"]


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Mode(str, Enum):
    explain = "explain"
    quiz = "quiz"
    flashcard = "flashcard"
    plan = "plan"


class UserContext(CamelModel):
    model_config = ConfigDict(frozen=True)

    weak_topics: List[str] = Field(default_factory=list)
    daily_budget_minutes: int = Field(ge=0)


class GenerationRequest(CamelModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    mode: Mode = Mode.explain
    count: Optional[int] = Field(default=None, ge=1)
    user_context: Optional[UserContext] = None


class SourceRef(CamelModel):
    doc_id: str
    title: str
    snippet: str
    source_url: Optional[str] = None


class AnswerResult(CamelModel):
    answer: str
    explanation: str
    practice_steps: List[str] = Field(default_factory=list, max_length=3)
    sources: List[SourceRef] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


class Flashcard(CamelModel):
    id: int = Field(ge=1)
    question: str
    answer: str
    topic: str


class StudyPlanTask(CamelModel):
    id: str
    day: int = Field(ge=1, le=7)
    time_slot: TimeSlot
    duration_minutes: int = Field(ge=20, le=30)
    topic: str
    activity: str
    description: str
    completed: bool = False


class StudyPlan(CamelModel):
    id: str
    user_id: str
    daily_hours: int = Field(ge=2)
    weak_topics: List[str] = Field(default_factory=list)
    tasks: List[StudyPlanTask] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_task_ids: List[str] = Field(default_factory=list)
    weekly_progress_percent: int = Field(default=0, ge=0, le=100)

    def minutes_by_day(self) -> dict:
        totals = {day: 0 for day in range(1, 8)}
        for task in self.tasks:
            totals[task.day] += task.duration_minutes
        return totals


class QuizQuestion(CamelModel):
    id: str
    question: str
    answer: str
    explanation: str
    topic: str


class GradeResult(CamelModel):
    correct: bool
    explanation: str
    new_score: int


# ----------------- Request bodies -----------------

class AskRequest(CamelModel):
    text: str = ""
    mode: str = Mode.explain.value
    session_id: Optional[str] = None
    user_id: Optional[str] = None


class QuizStartRequest(CamelModel):
    user_id: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    count: int = Field(default=5, ge=1, le=50)


class QuizAnswerRequest(CamelModel):
    question_id: str = ""
    user_answer: str = ""
    quiz_id: Optional[str] = None


class PlanGenerateRequest(CamelModel):
    user_id: Optional[str] = None
    daily_hours: int = 0
    weak_topics: List[str] = Field(default_factory=list)


class PlanProgressRequest(CamelModel):
    user_id: Optional[str] = None
    plan_id: Optional[str] = None
    task_id: Optional[str] = None
    completed: bool = True


class FlashcardRequest(CamelModel):
    topic: str = ""
    count: int = Field(default=5, ge=1, le=50)


class FeedbackRequest(CamelModel):
    response_id: Optional[str] = None
    user_id: Optional[str] = None
    is_positive: bool = True
    feedback: Optional[str] = None
