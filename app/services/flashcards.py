from __future__ import annotations

import re
from typing import List, Optional

import structlog

from app.models import Flashcard
from app.services.fallbacks import fallback_flashcards
from app.services.llm import TextModelClient
from app.services.logging import log_performance
from app.services.monitoring import record_generation

logger = structlog.get_logger()

FLASHCARD_MAX_TOKENS = 500

_QUESTION = re.compile(r"question:(.*)", re.IGNORECASE)
_ANSWER = re.compile(r"answer:(.*)", re.IGNORECASE)


def build_flashcard_prompt(topic: str, count: int) -> str:
    return (
        f"Generate {count} educational flashcards about {topic}.\n"
        "Put each card on two lines:\n"
        "Question: <question>\n"
        "Answer: <answer>\n"
        "Make them progressively harder, covering fundamentals to advanced concepts.\n"
        "Focus on key principles, formulas, and problem-solving approaches."
    )


def parse_flashcards(text: str, topic: str, count: int) -> List[Flashcard]:
    """Pull Question:/Answer: line pairs out of free text, at most `count`"""
    cards: List[Flashcard] = []
    question = ""
    answer = ""

    def flush() -> None:
        cards.append(Flashcard(id=len(cards) + 1, question=question.strip(), answer=answer.strip(), topic=topic))

    for line in (text or "").split("\n"):
        q_match = _QUESTION.search(line)
        if q_match:
            if question and answer:
                flush()
                if len(cards) >= count:
                    break
            question = q_match.group(1).strip()
            answer = ""
            continue
        a_match = _ANSWER.search(line)
        if a_match:
            answer = a_match.group(1).strip()

    if question and answer and len(cards) < count:
        flush()

    return cards


class FlashcardGenerator:
    def __init__(self, model_client: Optional[TextModelClient] = None):
        self.model_client = model_client

    @log_performance("flashcards_generate")
    def generate(self, topic: str, count: int = 5) -> List[Flashcard]:
        """Between 1 and `count` cards, ids dense from 1; never raises"""
        count = max(1, count)

        if self.model_client is not None:
            try:
                raw = self.model_client.generate(build_flashcard_prompt(topic, count), max_tokens=FLASHCARD_MAX_TOKENS)
            except Exception as e:
                logger.warning("model_generation_failed", kind="flashcards", topic=topic, error=str(e))
                record_generation("flashcards", "error")
            else:
                cards = parse_flashcards(raw, topic, count)
                if cards:
                    record_generation("flashcards", "model")
                    return cards
                logger.info("flashcard_parse_failed", topic=topic, raw_length=len(raw or ""))

        record_generation("flashcards", "fallback")
        return fallback_flashcards(topic, count)
