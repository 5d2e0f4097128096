from __future__ import annotations

import re
from typing import List, Optional

import structlog

from app.models import AnswerResult
from app.services.fallbacks import (
    EMPTY_MODEL_ANSWER,
    GENERIC_ANSWER,
    GENERIC_EXPLANATION,
    GENERIC_PRACTICE,
    ResponseFallbackTable,
    generate_sources,
)
from app.services.llm import TextModelClient
from app.services.logging import log_performance
from app.services.monitoring import record_generation

logger = structlog.get_logger()

TABLE_CONFIDENCE = 0.9
MODEL_CONFIDENCE = 0.85
GENERIC_CONFIDENCE = 0.7

ANSWER_MAX_TOKENS = 300

_BULLET_PREFIX = re.compile(r"^[-*\d.)\s]+")


def build_answer_prompt(question: str, mode: str) -> str:
    return (
        f"You are an AI study buddy. Mode: {mode}.\n"
        f"Question: {question}\n\n"
        "Please respond with:\n"
        "- A concise answer.\n"
        '- A short explanation section labeled "Explanation:".\n'
        '- Exactly 3 short practice steps labeled "Practice:" as a bulleted list.'
    )


def extract_section(text: str, label: str) -> Optional[str]:
    """Everything after the first `label` followed by a colon or newline"""
    match = re.search(rf"{re.escape(label)}[:\n]+([\s\S]*)", text, re.IGNORECASE)
    return match.group(1).strip() if match else None


def extract_practice(text: str) -> List[str]:
    """
    Up to 3 non-empty lines following the first "practice" in the text,
    with bullet and numbering markers stripped. The word is matched anywhere,
    so prose mentioning practice before the list also triggers it.
    """
    index = text.lower().find("practice")
    if index == -1:
        return list(GENERIC_PRACTICE)
    lines = text[index:].split("\n")[1:]
    items = [_BULLET_PREFIX.sub("", line).strip() for line in lines]
    items = [item for item in items if item][:3]
    return items or list(GENERIC_PRACTICE)


class AnswerComposer:
    def __init__(self, model_client: Optional[TextModelClient] = None, fallback_table: Optional[ResponseFallbackTable] = None):
        self.model_client = model_client
        self.fallback_table = fallback_table or ResponseFallbackTable()

    @log_performance("answer_compose")
    def compose(self, question: str, mode: str = "explain") -> AnswerResult:
        """Best-effort answer; never raises"""
        entry = self.fallback_table.match(question)
        if entry is not None:
            record_generation("answer", "table")
            return AnswerResult(
                answer=entry.answer,
                explanation=entry.explanation,
                practice_steps=list(entry.practice),
                sources=generate_sources(entry.key),
                confidence=TABLE_CONFIDENCE,
            )

        if self.model_client is not None:
            try:
                raw = self.model_client.generate(build_answer_prompt(question, mode), max_tokens=ANSWER_MAX_TOKENS)
            except Exception as e:
                logger.warning("model_generation_failed", kind="answer", error=str(e))
                record_generation("answer", "error")
            else:
                record_generation("answer", "model")
                return self.from_model_text(raw, question)

        record_generation("answer", "fallback")
        return self.generic_answer(question)

    def from_model_text(self, raw: str, question: str) -> AnswerResult:
        text = (raw or "").strip() or EMPTY_MODEL_ANSWER
        return AnswerResult(
            answer=text,
            explanation=extract_section(text, "Explanation") or text,
            practice_steps=extract_practice(text),
            sources=generate_sources(question),
            confidence=MODEL_CONFIDENCE,
        )

    @staticmethod
    def generic_answer(question: str) -> AnswerResult:
        return AnswerResult(
            answer=GENERIC_ANSWER,
            explanation=GENERIC_EXPLANATION,
            practice_steps=list(GENERIC_PRACTICE),
            sources=generate_sources(question),
            confidence=GENERIC_CONFIDENCE,
        )
