"""
Weekly study plan generation.

A configured model is asked for the whole week as JSON first. When it is not
configured, fails, or answers with something that does not decode into a
valid plan, the week is built locally:

1. weak topics are spread over the 7 days round-robin, and days left empty are
   backfilled with the least-used topic;
2. tasks of 20-30 minutes are drawn day by day from a single remaining-minutes
   budget of ``daily_hours * 60`` shared by the whole week. That budget is
   global, not per day: the first days can use all of it and leave the rest
   of the week empty.
"""
from __future__ import annotations

import json
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.errors import InvalidArgument, ParseFailure
from app.models import StudyPlan, StudyPlanTask, TimeSlot
from app.services.llm import TextModelClient, clean_json_like
from app.services.logging import log_performance
from app.services.monitoring import record_generation

logger = structlog.get_logger()

MIN_DAILY_HOURS = 2
DAYS = range(1, 8)
TIME_SLOTS: Tuple[str, ...] = ("Morning", "Afternoon", "Evening")
MIN_TASK_MINUTES = 20
MAX_TASK_MINUTES = 30
ACTIVITIES: Tuple[str, ...] = (
    "Review notes",
    "Practice problems",
    "Watch a tutorial",
    "Take a mini-quiz",
    "Summarize key concepts",
    "Create flashcards",
)
PLAN_MAX_TOKENS = 1500

DEFAULT_TIME_SLOT = "Morning"
DEFAULT_DURATION = MAX_TASK_MINUTES
DEFAULT_ACTIVITY = "Study session"
DEFAULT_TOPIC = "General review"


def build_plan_prompt(daily_hours: int, weak_topics: Sequence[str]) -> str:
    topics = ", ".join(weak_topics)
    return (
        "You are an expert study coach. Create a 7-day study plan for a student "
        f"who can study {daily_hours} hours per day and is weak in: {topics}.\n\n"
        'Return ONLY a JSON object of the form {"tasks": [...]} where every task has:\n'
        '- "day": integer 1-7\n'
        '- "timeSlot": one of "Morning", "Afternoon", "Evening"\n'
        '- "duration": minutes, integer between 20 and 30\n'
        '- "topic": one of the weak topics\n'
        '- "activity": short activity name\n'
        '- "description": one sentence describing the task\n\n'
        "Spread the topics across different days, make the difficulty progress "
        f"through the week and never plan more than {daily_hours * 60} minutes on a single day."
    )


# ----------------- Model output decoding -----------------

class RawPlanTask(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    day: Optional[int] = Field(default=None, ge=1, le=7)
    time_slot: Optional[TimeSlot] = Field(default=None, alias="timeSlot")
    duration: Optional[int] = Field(default=None, ge=MIN_TASK_MINUTES, le=MAX_TASK_MINUTES)
    topic: Optional[str] = None
    activity: Optional[str] = None
    description: Optional[str] = None


class RawPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tasks: List[RawPlanTask] = Field(min_length=1)


@dataclass(frozen=True)
class ParsedPlan:
    tasks: Tuple[RawPlanTask, ...]

    @staticmethod
    def default_day(index: int) -> int:
        return min(index // 3 + 1, 7)

    def day_of(self, index: int) -> int:
        day = self.tasks[index].day
        return day if day is not None else self.default_day(index)

    def to_tasks(self, weak_topics: Sequence[str]) -> List[StudyPlanTask]:
        """Fill every missing field with its default; ids are always positional"""
        fallback_topic = weak_topics[0] if weak_topics else DEFAULT_TOPIC
        tasks = []
        for index, raw in enumerate(self.tasks):
            topic = raw.topic or fallback_topic
            tasks.append(
                StudyPlanTask(
                    id=f"task-{index + 1}",
                    day=self.day_of(index),
                    time_slot=raw.time_slot or DEFAULT_TIME_SLOT,
                    duration_minutes=raw.duration if raw.duration is not None else DEFAULT_DURATION,
                    topic=topic,
                    activity=raw.activity or DEFAULT_ACTIVITY,
                    description=raw.description or f"Focused study session on {topic}",
                )
            )
        return tasks


def decode_plan(text: str, daily_budget_minutes: int) -> Union[ParsedPlan, ParseFailure]:
    """Decode model output into a ParsedPlan, or return the ParseFailure explaining why not"""
    try:
        data = json.loads(clean_json_like(text or "", opening="{"))
    except ValueError as e:
        return ParseFailure(f"Plan is not valid JSON: {e}")

    try:
        raw = RawPlan.model_validate(data)
    except ValidationError as e:
        return ParseFailure(f"Plan does not match the task schema: {e.error_count()} error(s)")

    parsed = ParsedPlan(tasks=tuple(raw.tasks))
    minutes: Dict[int, int] = {}
    for index, task in enumerate(parsed.tasks):
        day = parsed.day_of(index)
        minutes[day] = minutes.get(day, 0) + (task.duration if task.duration is not None else DEFAULT_DURATION)
    over = sorted(day for day, total in minutes.items() if total > daily_budget_minutes)
    if over:
        return ParseFailure(f"Plan exceeds the daily budget of {daily_budget_minutes} minutes on day(s) {over}")
    return parsed


# ----------------- Local fallback -----------------

def distribute_topics(weak_topics: Iterable[str]) -> Dict[int, List[str]]:
    """Assign topics to days round-robin, then backfill empty days with the least-used topic"""
    topics = list(weak_topics)
    day_topics: Dict[int, List[str]] = {day: [] for day in DAYS}
    for index, topic in enumerate(topics):
        day_topics[index % 7 + 1].append(topic)

    if not topics:
        return day_topics

    usage = {topic: 0 for topic in topics}
    for assigned in day_topics.values():
        for topic in assigned:
            usage[topic] += 1

    for day in DAYS:
        if not day_topics[day]:
            # min() keeps the first of equal counts, i.e. topic list order
            topic = min(usage, key=usage.get)
            day_topics[day].append(topic)
            usage[topic] += 1
    return day_topics


def build_fallback_tasks(
    day_topics: Dict[int, List[str]],
    daily_budget_minutes: int,
    rng: random.Random,
) -> List[StudyPlanTask]:
    tasks: List[StudyPlanTask] = []
    remaining = daily_budget_minutes

    for day in DAYS:
        candidates = day_topics.get(day) or []
        day_minutes = 0
        while candidates and day_minutes < min(remaining, daily_budget_minutes):
            ceiling = min(MAX_TASK_MINUTES, remaining, daily_budget_minutes - day_minutes)
            if ceiling < MIN_TASK_MINUTES:
                break
            duration = rng.randint(MIN_TASK_MINUTES, ceiling)
            time_slot = rng.choice(TIME_SLOTS)
            topic = rng.choice(candidates)
            activity = rng.choice(ACTIVITIES)
            tasks.append(
                StudyPlanTask(
                    id=f"task-{len(tasks) + 1}",
                    day=day,
                    time_slot=time_slot,
                    duration_minutes=duration,
                    topic=topic,
                    activity=activity,
                    description=f"{activity} for {topic}",
                )
            )
            day_minutes += duration
            remaining -= duration

        # Nothing left can hold another task
        if remaining < MIN_TASK_MINUTES:
            break

    return tasks


class StudyPlanGenerator:
    def __init__(self, model_client: Optional[TextModelClient] = None, rng: Optional[random.Random] = None):
        self.model_client = model_client
        self.rng = rng or random.Random()

    @log_performance("study_plan_generate")
    def generate(self, user_id: str, daily_hours: int, weak_topics: Sequence[str]) -> StudyPlan:
        if daily_hours < MIN_DAILY_HOURS:
            raise InvalidArgument(f"Daily study hours must be at least {MIN_DAILY_HOURS}.")

        topics = list(weak_topics)
        total_daily_minutes = daily_hours * 60

        tasks = None
        if self.model_client is not None and topics:
            tasks = self._tasks_from_model(daily_hours, topics, total_daily_minutes)

        if tasks is None:
            record_generation("study_plan", "fallback")
            tasks = build_fallback_tasks(distribute_topics(topics), total_daily_minutes, self.rng)

        return StudyPlan(
            id=str(uuid.uuid4()),
            user_id=user_id,
            daily_hours=daily_hours,
            weak_topics=topics,
            tasks=tasks,
        )

    def _tasks_from_model(self, daily_hours: int, topics: List[str], total_daily_minutes: int) -> Optional[List[StudyPlanTask]]:
        try:
            raw = self.model_client.generate(build_plan_prompt(daily_hours, topics), max_tokens=PLAN_MAX_TOKENS)
        except Exception as e:
            logger.warning("model_generation_failed", kind="study_plan", error=str(e))
            record_generation("study_plan", "error")
            return None

        result = decode_plan(raw, total_daily_minutes)
        if isinstance(result, ParseFailure):
            logger.info("plan_decode_failed", error=str(result))
            return None
        record_generation("study_plan", "model")
        return result.to_tasks(topics)


# ----------------- Progress & lifecycle -----------------

def apply_progress(plan: StudyPlan, task_id: str, completed: bool) -> StudyPlan:
    tasks = [
        task.model_copy(update={"completed": completed}) if task.id == task_id else task
        for task in plan.tasks
    ]
    done = [task.id for task in tasks if task.completed]
    percent = round(len(done) / len(tasks) * 100) if tasks else 0
    return plan.model_copy(
        update={"tasks": tasks, "completed_task_ids": done, "weekly_progress_percent": percent}
    )


def is_current_week(plan: StudyPlan, now: Optional[datetime] = None) -> bool:
    """Plans are valid for the ISO week they were created in"""
    now = now or datetime.now(timezone.utc)
    created = plan.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    created = created.astimezone(timezone.utc)
    now = now.astimezone(timezone.utc)
    return tuple(created.isocalendar())[:2] == tuple(now.isocalendar())[:2]
