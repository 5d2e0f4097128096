from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError
import structlog

from app.middleware.rate_limit import ai_generation_limit, general_api_limit
from app.models import PlanGenerateRequest, PlanProgressRequest, StudyPlan
from app.services.assistant import StudyAssistant, get_assistant
from app.services.session_store import SessionStore, get_session_store
from app.services.study_plan import MIN_DAILY_HOURS, apply_progress, is_current_week

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/plan", tags=["plan"])


def _load_plan(store: SessionStore, user_id: str):
    data = store.get_study_plan(user_id)
    if not data:
        return None
    try:
        return StudyPlan.model_validate(data)
    except ValidationError as e:
        logger.warning("stored_plan_invalid", user_id=user_id, error=str(e))
        store.delete_study_plan(user_id)
        return None


def _dump(plan: StudyPlan) -> dict:
    return plan.model_dump(mode="json", by_alias=True)


@router.post("/generate")
@ai_generation_limit()
def generate_plan(request: Request, body: PlanGenerateRequest, assistant: StudyAssistant = Depends(get_assistant), store: SessionStore = Depends(get_session_store)):
    if not body.user_id:
        raise HTTPException(status_code=400, detail="User ID is required.")
    if body.daily_hours < MIN_DAILY_HOURS:
        raise HTTPException(status_code=400, detail=f"Daily study hours must be at least {MIN_DAILY_HOURS}.")
    weak_topics = [t.strip() for t in body.weak_topics if t and t.strip()]
    if not weak_topics:
        raise HTTPException(status_code=400, detail="At least one weak topic is required.")

    plan = assistant.plans.generate(body.user_id, body.daily_hours, weak_topics)
    payload = _dump(plan)
    store.store_study_plan(body.user_id, payload)
    return {"success": True, "plan": payload}


@router.get("/current/{user_id}")
@general_api_limit()
def current_plan(request: Request, user_id: str, store: SessionStore = Depends(get_session_store)):
    plan = _load_plan(store, user_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="No active study plan found.")
    if not is_current_week(plan):
        store.delete_study_plan(user_id)
        raise HTTPException(status_code=404, detail="Study plan has expired. Please generate a new one.")
    return {"success": True, "plan": _dump(plan)}


@router.delete("/current/{user_id}")
@general_api_limit()
def delete_plan(request: Request, user_id: str, store: SessionStore = Depends(get_session_store)):
    store.delete_study_plan(user_id)
    return {"success": True, "message": "Study plan deleted successfully."}


@router.post("/progress")
@general_api_limit()
def update_progress(request: Request, body: PlanProgressRequest, store: SessionStore = Depends(get_session_store)):
    if not body.user_id or not body.plan_id or not body.task_id:
        raise HTTPException(status_code=400, detail="User ID, Plan ID, and Task ID are required.")

    store.store_progress(body.plan_id, body.user_id, body.task_id, body.completed)

    plan = _load_plan(store, body.user_id)
    weekly_progress = None
    if plan is not None and plan.id == body.plan_id:
        plan = apply_progress(plan, body.task_id, body.completed)
        store.store_study_plan(body.user_id, _dump(plan))
        weekly_progress = plan.weekly_progress_percent

    return {"success": True, "message": "Progress updated successfully", "weeklyProgressPercent": weekly_progress}
