from fastapi import APIRouter, Depends, HTTPException, Request

from app.middleware.rate_limit import ai_generation_limit
from app.models import FlashcardRequest
from app.services.assistant import StudyAssistant, get_assistant


router = APIRouter(prefix="/api/v1/flashcards", tags=["flashcards"])


@router.post("/generate")
@ai_generation_limit()
def generate_flashcards(request: Request, body: FlashcardRequest, assistant: StudyAssistant = Depends(get_assistant)):
    topic = body.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="Topic is required.")
    cards = assistant.flashcards.generate(topic, body.count)
    return {
        "success": True,
        "flashcards": [c.model_dump(by_alias=True) for c in cards],
        "topic": topic,
        "count": len(cards),
    }
