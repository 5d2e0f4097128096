import uuid

from fastapi import APIRouter, HTTPException, Request

from app.middleware.rate_limit import general_api_limit
from app.models import QuizAnswerRequest, QuizStartRequest
from app.services.quiz import generate_quiz, grade_answer


router = APIRouter(prefix="/api/v1/quiz", tags=["quiz"])


@router.post("/start")
@general_api_limit()
def start_quiz(request: Request, body: QuizStartRequest):
    if not body.user_id:
        raise HTTPException(status_code=400, detail="User ID is required.")
    quiz = generate_quiz(body.topics, body.count)
    return {
        "success": True,
        "quizId": str(uuid.uuid4()),
        "quiz": [q.model_dump(by_alias=True) for q in quiz],
    }


@router.post("/answer")
@general_api_limit()
def answer_quiz(request: Request, body: QuizAnswerRequest):
    if not body.user_answer.strip():
        raise HTTPException(status_code=400, detail="Answer is required.")
    result = grade_answer(body.question_id, body.user_answer)
    return {"success": True, **result.model_dump(by_alias=True)}
