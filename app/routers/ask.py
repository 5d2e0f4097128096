import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from app.middleware.rate_limit import ai_generation_limit, general_api_limit
from app.models import AskRequest, FeedbackRequest
from app.services.assistant import StudyAssistant, get_assistant
from app.services.session_store import SessionStore, get_session_store


router = APIRouter(prefix="/api/v1", tags=["ask"])


@router.post("/ask")
@ai_generation_limit()
def ask(request: Request, body: AskRequest, assistant: StudyAssistant = Depends(get_assistant), store: SessionStore = Depends(get_session_store)):
    question = body.text.strip()
    if not question:
        raise HTTPException(status_code=400, detail="Question is required.")

    result = assistant.answers.compose(question, body.mode)

    if body.session_id and body.user_id:
        store.store_message(body.session_id, body.user_id, "user", question)
        store.store_message(body.session_id, body.user_id, "assistant", result.answer)

    return {"success": True, "responseId": str(uuid.uuid4()), **result.model_dump(mode="json", by_alias=True)}


@router.get("/session/{session_id}/messages")
@general_api_limit()
def session_messages(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    messages = store.get_session_messages(session_id)
    return {"success": True, "sessionId": session_id, "messages": messages}


@router.delete("/session/{session_id}")
@general_api_limit()
def clear_session(request: Request, session_id: str, store: SessionStore = Depends(get_session_store)):
    store.clear_session(session_id)
    return {"success": True, "message": "Session cleared."}


@router.post("/answer/feedback")
@general_api_limit()
def answer_feedback(request: Request, body: FeedbackRequest, store: SessionStore = Depends(get_session_store)):
    if not body.response_id or not body.user_id:
        raise HTTPException(status_code=400, detail="Response ID and User ID are required.")
    if not store.store_feedback(body.response_id, body.user_id, body.is_positive, body.feedback):
        raise HTTPException(status_code=500, detail="Failed to record feedback. Please try again.")
    return {"success": True, "message": "Feedback recorded successfully."}
