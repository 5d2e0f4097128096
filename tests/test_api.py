"""
Integration tests for API endpoints
"""
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.assistant import StudyAssistant, get_assistant
from app.services.session_store import MEMORY_URL, SessionStore, get_session_store


@pytest.fixture
def store():
    return SessionStore(MEMORY_URL)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_assistant] = lambda: StudyAssistant()
    yield TestClient(app)
    app.dependency_overrides.clear()


def use_model(response):
    model = MagicMock()
    model.generate.return_value = response
    app.dependency_overrides[get_assistant] = lambda: StudyAssistant(model)
    return model


class TestHealthEndpoints:
    def test_status(self, client):
        response = client.get("/api/v1/status")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert "timestamp" in data

    def test_health_check(self, client):
        """Test health check endpoint"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["model"]["model"] is None

    def test_metrics_endpoint(self, client):
        """Test metrics endpoint"""
        client.post("/api/v1/ask", json={"text": "What is a derivative?"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "ai_generation_requests_total" in response.text

    def test_metrics_label_routes_not_ids(self, client):
        client.get("/api/v1/session/secret-session-42/messages")
        text = client.get("/metrics").text
        assert 'endpoint="/api/v1/session/{session_id}/messages"' in text
        assert "secret-session-42" not in text


class TestAskEndpoint:
    def test_fallback_table_answer(self, client):
        response = client.post("/api/v1/ask", json={"text": "Explain the chain rule"})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["confidence"] == 0.9
        assert len(data["practiceSteps"]) == 3
        assert data["sources"][0]["docId"] == "general-knowledge"
        assert data["responseId"]

    def test_generic_answer(self, client):
        data = client.post("/api/v1/ask", json={"text": "Who painted the Mona Lisa?"}).json()
        assert data["confidence"] == 0.7

    def test_model_answer(self, client):
        model = use_model("Da Vinci.\nExplanation: Painted around 1503.\nPractice:\n- Visit the Louvre")
        data = client.post("/api/v1/ask", json={"text": "Who painted the Mona Lisa?", "mode": "quiz"}).json()
        assert data["confidence"] == 0.85
        assert data["practiceSteps"] == ["Visit the Louvre"]
        assert "Mode: quiz" in model.generate.call_args[0][0]

    def test_missing_text(self, client):
        response = client.post("/api/v1/ask", json={"text": "  "})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Question is required."}

    def test_conversation_stored(self, client, store):
        client.post("/api/v1/ask", json={"text": "What is a derivative?", "sessionId": "s1", "userId": "u1"})
        response = client.get("/api/v1/session/s1/messages")
        messages = response.json()["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert messages[0]["content"] == "What is a derivative?"

        client.delete("/api/v1/session/s1")
        assert store.get_session_messages("s1") == []

    def test_feedback(self, client, store):
        response = client.post("/api/v1/answer/feedback", json={"responseId": "r1", "userId": "u1", "isPositive": True})
        assert response.status_code == 200
        assert store.get("feedback:r1")["userId"] == "u1"

    def test_feedback_requires_ids(self, client):
        assert client.post("/api/v1/answer/feedback", json={"userId": "u1"}).status_code == 400


class TestQuizEndpoints:
    def test_start(self, client):
        data = client.post("/api/v1/quiz/start", json={"userId": "u1", "count": 2}).json()
        assert data["success"] is True
        assert data["quizId"]
        assert [q["id"] for q in data["quiz"]] == ["calc-1", "calc-2"]

    def test_start_requires_user(self, client):
        assert client.post("/api/v1/quiz/start", json={"count": 2}).status_code == 400

    def test_answer(self, client):
        data = client.post("/api/v1/quiz/answer", json={"questionId": "calc-1", "userAnswer": "2X "}).json()
        assert data["correct"] is True
        assert data["newScore"] == 10

    def test_unknown_question(self, client):
        data = client.post("/api/v1/quiz/answer", json={"questionId": "bogus-id", "userAnswer": "x"}).json()
        assert data["correct"] is False
        assert data["newScore"] == 0
        assert data["explanation"] == "Question not found"

    def test_missing_question_id(self, client):
        response = client.post("/api/v1/quiz/answer", json={"userAnswer": "2x"})
        assert response.status_code == 200
        data = response.json()
        assert data["correct"] is False
        assert data["explanation"] == "Question not found"

    def test_empty_answer(self, client):
        assert client.post("/api/v1/quiz/answer", json={"questionId": "calc-1", "userAnswer": ""}).status_code == 400


class TestFlashcardEndpoints:
    def test_generate(self, client):
        data = client.post("/api/v1/flashcards/generate", json={"topic": "calculus", "count": 3}).json()
        assert data["count"] == 3
        assert data["topic"] == "calculus"
        assert [c["id"] for c in data["flashcards"]] == [1, 2, 3]

    def test_model_cards(self, client):
        use_model("Question: What is H2O?\nAnswer: Water")
        data = client.post("/api/v1/flashcards/generate", json={"topic": "chemistry", "count": 3}).json()
        assert data["flashcards"] == [{"id": 1, "question": "What is H2O?", "answer": "Water", "topic": "chemistry"}]

    def test_missing_topic(self, client):
        assert client.post("/api/v1/flashcards/generate", json={"count": 3}).status_code == 400


class TestPlanEndpoints:
    def generate(self, client, **overrides):
        body = {"userId": "u1", "dailyHours": 2, "weakTopics": ["algebra"]}
        body.update(overrides)
        return client.post("/api/v1/plan/generate", json=body)

    def test_generate_and_fetch(self, client):
        plan = self.generate(client).json()["plan"]
        assert plan["userId"] == "u1"
        assert sum(t["durationMinutes"] for t in plan["tasks"]) <= 120
        assert plan["weeklyProgressPercent"] == 0

        current = client.get("/api/v1/plan/current/u1").json()["plan"]
        assert current["id"] == plan["id"]
        assert current["tasks"] == plan["tasks"]

    def test_model_plan(self, client):
        tasks = [
            {"day": d, "timeSlot": "Evening", "duration": 30, "topic": "algebra",
             "activity": "Drill", "description": f"Drill set {d}"}
            for d in range(1, 8)
        ]
        use_model(json.dumps({"tasks": tasks}))
        plan = self.generate(client).json()["plan"]
        assert [t["description"] for t in plan["tasks"]] == [f"Drill set {d}" for d in range(1, 8)]

    @pytest.mark.parametrize("overrides,error", [
        ({"userId": None}, "User ID is required."),
        ({"dailyHours": 1}, "Daily study hours must be at least 2."),
        ({"weakTopics": []}, "At least one weak topic is required."),
    ])
    def test_validation(self, client, overrides, error):
        response = self.generate(client, **overrides)
        assert response.status_code == 400
        assert response.json()["error"] == error

    def test_malformed_body_uses_error_shape(self, client):
        response = self.generate(client, dailyHours=2.5)
        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"].startswith("dailyHours:")
        assert "detail" not in data

    def test_missing_plan(self, client):
        response = client.get("/api/v1/plan/current/nobody")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_expired_plan_removed(self, client, store):
        plan = self.generate(client).json()["plan"]
        plan["createdAt"] = (datetime.now(timezone.utc) - timedelta(days=14)).isoformat()
        store.store_study_plan("u1", plan)

        response = client.get("/api/v1/plan/current/u1")
        assert response.status_code == 404
        assert "expired" in response.json()["error"]
        assert store.get_study_plan("u1") is None

    def test_delete(self, client, store):
        self.generate(client)
        assert client.delete("/api/v1/plan/current/u1").status_code == 200
        assert store.get_study_plan("u1") is None

    def test_progress(self, client, store):
        plan = self.generate(client).json()["plan"]
        task_id = plan["tasks"][0]["id"]

        data = client.post("/api/v1/plan/progress", json={
            "userId": "u1", "planId": plan["id"], "taskId": task_id, "completed": True,
        }).json()

        assert data["success"] is True
        stored = store.get_study_plan("u1")
        assert stored["completedTaskIds"] == [task_id]
        assert stored["weeklyProgressPercent"] == data["weeklyProgressPercent"] > 0
        assert store.get_list(f"study_plan:{plan['id']}:u1")[0]["taskId"] == task_id

    def test_progress_requires_ids(self, client):
        assert client.post("/api/v1/plan/progress", json={"userId": "u1"}).status_code == 400
