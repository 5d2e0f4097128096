"""
Unit tests for the session store (in-memory backend)
"""
import pytest

from app.services.session_store import MEMORY_URL, SessionStore


@pytest.fixture
def store():
    return SessionStore(MEMORY_URL)


class TestKeyValue:
    def test_set_get_delete(self, store):
        assert store.backend == "memory"
        assert store.set("k", {"a": 1})
        assert store.get("k") == {"a": 1}
        assert store.delete("k")
        assert store.get("k") is None
        assert not store.delete("k")

    def test_append_and_list(self, store):
        assert store.append("l", 1) == 1
        assert store.append("l", {"x": 2}) == 2
        assert store.get_list("l") == [1, {"x": 2}]
        assert store.get_list("missing") == []

    def test_clear_pattern(self, store):
        store.set("feedback:1", {})
        store.set("feedback:2", {})
        store.set("user:1:profile", {})
        assert store.clear_pattern("feedback:*") == 2
        assert store.get("user:1:profile") == {}

    def test_clear_pattern_wildcard_in_middle(self, store):
        store.set("session:a:messages", [])
        store.set("session:b:messages", [])
        store.set("session:a:meta", {})
        assert store.clear_pattern("session:*:messages") == 2
        assert store.get("session:a:meta") == {}
        assert store.get("session:b:messages") is None

    def test_unreachable_redis_falls_back_to_memory(self):
        store = SessionStore("redis://127.0.0.1:1/0")
        assert store.backend == "memory"
        assert store.set("k", "v")
        assert store.get("k") == "v"


class TestDomainOperations:
    def test_messages(self, store):
        store.store_message("s1", "u1", "user", "What is a derivative?")
        store.store_message("s1", "u1", "assistant", "A rate of change.")
        messages = store.get_session_messages("s1")
        assert [(m["role"], m["content"]) for m in messages] == [
            ("user", "What is a derivative?"),
            ("assistant", "A rate of change."),
        ]
        assert all(m["userId"] == "u1" and m["timestamp"] for m in messages)
        assert store.clear_session("s1")
        assert store.get_session_messages("s1") == []

    def test_feedback(self, store):
        assert store.store_feedback("r1", "u1", False, "too vague")
        saved = store.get("feedback:r1")
        assert saved["isPositive"] is False
        assert saved["feedback"] == "too vague"

    def test_profile(self, store):
        assert store.get_user_profile("u1") is None
        store.update_user_profile("u1", {"subjects": ["calculus"]})
        assert store.get_user_profile("u1") == {"subjects": ["calculus"]}

    def test_study_plan(self, store):
        store.store_study_plan("u1", {"id": "p1"})
        assert store.get("study_plan:u1:current") == {"id": "p1"}
        assert store.get_study_plan("u1") == {"id": "p1"}
        assert store.delete_study_plan("u1")
        assert store.get_study_plan("u1") is None

    def test_progress(self, store):
        store.store_progress("p1", "u1", "task-1", True)
        store.store_progress("p1", "u1", "task-2", False)
        entries = store.get_list("study_plan:p1:u1")
        assert [(e["taskId"], e["completed"]) for e in entries] == [("task-1", True), ("task-2", False)]
