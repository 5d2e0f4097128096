"""
Wires one text model client into every generator
"""
from __future__ import annotations

import random
from functools import lru_cache
from typing import List, Optional, Union

from app.errors import InvalidArgument
from app.models import AnswerResult, Flashcard, GenerationRequest, Mode, StudyPlan
from app.services.answers import AnswerComposer
from app.services.flashcards import FlashcardGenerator
from app.services.llm import TextModelClient, build_model_client
from app.services.study_plan import StudyPlanGenerator

DEFAULT_FLASHCARD_COUNT = 5


class StudyAssistant:
    def __init__(self, model_client: Optional[TextModelClient] = None, rng: Optional[random.Random] = None):
        self.model_client = model_client
        self.answers = AnswerComposer(model_client)
        self.flashcards = FlashcardGenerator(model_client)
        self.plans = StudyPlanGenerator(model_client, rng=rng)

    @property
    def model_configured(self) -> bool:
        return self.model_client is not None

    def dispatch(self, request: GenerationRequest, user_id: str = "anonymous") -> Union[AnswerResult, List[Flashcard], StudyPlan]:
        """
        Route a generation request by mode.

        Plan requests convert the minute budget to whole hours, rounding down,
        so a 150 minute budget yields a 2 hour (120 minute) plan.
        """
        if request.mode in (Mode.explain, Mode.quiz):
            return self.answers.compose(request.subject, request.mode.value)
        if request.mode == Mode.flashcard:
            return self.flashcards.generate(request.subject, request.count or DEFAULT_FLASHCARD_COUNT)
        if request.user_context is None:
            raise InvalidArgument("A plan request needs a user context.")
        context = request.user_context
        return self.plans.generate(user_id, context.daily_budget_minutes // 60, context.weak_topics)


@lru_cache(maxsize=1)
def get_assistant() -> StudyAssistant:
    return StudyAssistant(build_model_client())
