"""
Static content used before, or instead of, a model call
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.models import Flashcard, QuizQuestion, SourceRef


@dataclass(frozen=True)
class FallbackEntry:
    key: str
    answer: str
    explanation: str
    practice: Tuple[str, ...]


CHAIN_RULE = FallbackEntry(
    key="chain rule",
    answer="The chain rule is a fundamental theorem in calculus that allows us to find the derivative of composite functions.",
    explanation="If f(x) = g(h(x)), then f'(x) = g'(h(x)) · h'(x). This rule is essential for differentiating complex functions.",
    practice=(
        "Find the derivative of f(x) = (x² + 1)³",
        "Differentiate g(x) = sin(x²)",
        "Calculate the derivative of h(x) = e^(2x + 1)",
    ),
)

DERIVATIVE = FallbackEntry(
    key="derivative",
    answer="A derivative represents the rate of change of a function with respect to its variable.",
    explanation="The derivative f'(x) gives us the slope of the tangent line to the function f(x) at any point x.",
    practice=(
        "Find the derivative of f(x) = x³",
        "Calculate the derivative of g(x) = 2x + 5",
        "Find the derivative of h(x) = 1/x",
    ),
)

QUADRATIC = FallbackEntry(
    key="quadratic",
    answer="A quadratic equation is a second-degree polynomial equation in the form ax² + bx + c = 0.",
    explanation="Quadratic equations can be solved using factoring, completing the square, or the quadratic formula: x = (-b ± √(b² - 4ac)) / 2a.",
    practice=(
        "Solve x² - 5x + 6 = 0",
        "Find the roots of 2x² + 7x + 3 = 0",
        "Solve x² + 4x + 4 = 0",
    ),
)

# Order matters: "chain rule" questions usually also say "derivative"
DEFAULT_TRIGGERS: Tuple[Tuple[Tuple[str, ...], FallbackEntry], ...] = (
    (("chain rule",), CHAIN_RULE),
    (("derivative",), DERIVATIVE),
    (("quadratic", "solve"), QUADRATIC),
)

GENERIC_ANSWER = "I understand you're asking about this topic. Let me provide you with a helpful explanation."
GENERIC_EXPLANATION = (
    "This is a comprehensive explanation of the concept you asked about. "
    "I recommend reviewing the fundamentals and practicing with similar problems."
)
GENERIC_PRACTICE: Tuple[str, ...] = (
    "Review the basic concepts",
    "Practice with similar problems",
    "Take a quiz to test your understanding",
)
EMPTY_MODEL_ANSWER = "I could not generate a response."


class ResponseFallbackTable:
    """Priority-ordered trigger keywords mapped to canned answers"""

    def __init__(self, triggers=DEFAULT_TRIGGERS):
        self.triggers = tuple(triggers)

    def match(self, question: str) -> Optional[FallbackEntry]:
        lowered = (question or "").lower()
        for keywords, entry in self.triggers:
            if any(keyword in lowered for keyword in keywords):
                return entry
        return None


def generate_sources(question: str) -> List[SourceRef]:
    return [
        SourceRef(
            doc_id="general-knowledge",
            title="Educational Resources",
            snippet="Comprehensive study materials and explanations",
            source_url="#",
        )
    ]


# ----------------- Flashcards -----------------

FLASHCARD_DECKS: Dict[str, List[Tuple[str, str]]] = {
    "calculus": [
        ("What is the derivative of x²?", "2x"),
        ("What does the chain rule state?", "If f(x) = g(h(x)), then f'(x) = g'(h(x)) · h'(x)"),
        ("What is the integral of 2x?", "x² + C"),
        ("What is the derivative of sin(x)?", "cos(x)"),
        ("What is the power rule for derivatives?", "d/dx(x^n) = n·x^(n-1)"),
    ],
    "algebra": [
        ("What is the quadratic formula?", "x = (-b ± √(b² - 4ac)) / 2a"),
        ("How do you solve 2x + 5 = 13?", "Subtract 5 from both sides: 2x = 8, then divide by 2: x = 4"),
        ("What is factoring?", "Breaking down a polynomial into simpler factors"),
        ("What is the slope-intercept form?", "y = mx + b"),
        ("How do you find the slope between two points?", "m = (y₂ - y₁) / (x₂ - x₁)"),
    ],
    "physics": [
        ("What is Newton's First Law?", "An object at rest stays at rest unless acted upon by an external force"),
        ("What is the formula for kinetic energy?", "KE = ½mv²"),
        ("What is acceleration?", "Rate of change of velocity with respect to time"),
        ("What is the law of conservation of energy?", "Energy cannot be created or destroyed, only transformed"),
        ("What is the formula for force?", "F = ma"),
    ],
    "chemistry": [
        ("What is the chemical symbol for water?", "H₂O"),
        ("What is the atomic number of carbon?", "6"),
        ("What is a molecule?", "Two or more atoms bonded together"),
        ("What is the pH scale range?", "0 to 14"),
        ("What is a chemical reaction?", "Process where substances are transformed into new substances"),
    ],
    "biology": [
        ("What is the powerhouse of the cell?", "Mitochondria"),
        ("What is DNA?", "Deoxyribonucleic acid, the genetic material"),
        ("What is photosynthesis?", "Process where plants convert sunlight into energy"),
        ("What is evolution?", "Change in species over time through natural selection"),
        ("What is homeostasis?", "Maintenance of stable internal conditions"),
    ],
    "computer science": [
        ("What is an algorithm?", "A step-by-step procedure for solving a problem"),
        ("What is a variable?", "A container for storing data values"),
        ("What is a function?", "A reusable block of code that performs a specific task"),
        ("What is recursion?", "A function calling itself"),
        ("What is object-oriented programming?", "Programming paradigm based on objects containing data and code"),
    ],
}


def find_deck_key(topic: str) -> Optional[str]:
    lowered = (topic or "").lower()
    for key in FLASHCARD_DECKS:
        if key in lowered:
            return key
    return None


def fallback_flashcards(topic: str, count: int) -> List[Flashcard]:
    key = find_deck_key(topic)
    if key is None:
        return [
            Flashcard(
                id=1,
                question=f'No fallback cards for "{topic}"',
                answer=(
                    "The AI failed to generate cards for this topic, and no static "
                    "fallback exists. Please try a different topic."
                ),
                topic=topic,
            )
        ]
    return [
        Flashcard(id=index + 1, question=question, answer=answer, topic=topic)
        for index, (question, answer) in enumerate(FLASHCARD_DECKS[key][:count])
    ]


# ----------------- Quiz -----------------

QUIZ_BANK: Tuple[QuizQuestion, ...] = (
    QuizQuestion(
        id="calc-1",
        question="What is the derivative of x²?",
        answer="2x",
        explanation="Using the power rule: d/dx(x^n) = n·x^(n-1)",
        topic="calculus",
    ),
    QuizQuestion(
        id="calc-2",
        question="What is the integral of 2x?",
        answer="x² + C",
        explanation="The integral of 2x is x² + C, where C is the constant of integration",
        topic="calculus",
    ),
    QuizQuestion(
        id="alg-1",
        question="Solve for x: 2x + 5 = 13",
        answer="4",
        explanation="Subtract 5 from both sides: 2x = 8, then divide by 2: x = 4",
        topic="algebra",
    ),
)
