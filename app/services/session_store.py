"""
Redis-backed key/value store for chat turns, feedback, profiles and study plans
"""
import fnmatch
import json
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

import redis
import structlog

from app import config

logger = structlog.get_logger()

MEMORY_URL = "memory://"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionStore:
    def __init__(self, redis_url: str = config.REDIS_URL, ttl: int = config.SESSION_TTL_SECONDS):
        self.ttl = ttl
        self.redis_client = None
        self._memory_cache = {}
        if not redis_url or redis_url == MEMORY_URL:
            logger.info("session_store_in_memory")
            return
        try:
            client = redis.from_url(redis_url, decode_responses=True)
            client.ping()
            self.redis_client = client
            logger.info("Redis session store connected successfully")
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis not available, using in-memory store: {e}")

    @property
    def backend(self) -> str:
        return "redis" if self.redis_client is not None else "memory"

    # ----------------- Generic key/value -----------------

    def get(self, key: str) -> Optional[Any]:
        """Get a JSON value"""
        try:
            if self.redis_client:
                value = self.redis_client.get(key)
                return json.loads(value) if value else None
            return self._memory_cache.get(key)
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Store get error for key {key}: {e}")
            return None

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        """Set a JSON value; expire defaults to the store TTL"""
        try:
            if self.redis_client:
                return bool(self.redis_client.setex(key, expire or self.ttl, json.dumps(value)))
            self._memory_cache[key] = value
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"Store set error for key {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        try:
            if self.redis_client:
                return bool(self.redis_client.delete(key))
            return self._memory_cache.pop(key, None) is not None
        except redis.RedisError as e:
            logger.error(f"Store delete error for key {key}: {e}")
            return False

    def clear_pattern(self, pattern: str) -> int:
        """Clear all keys matching a glob-style pattern"""
        try:
            if self.redis_client:
                keys = list(self.redis_client.scan_iter(match=pattern))
                return self.redis_client.delete(*keys) if keys else 0
            keys_to_delete = [k for k in self._memory_cache if fnmatch.fnmatchcase(k, pattern)]
            for key in keys_to_delete:
                del self._memory_cache[key]
            return len(keys_to_delete)
        except redis.RedisError as e:
            logger.error(f"Store clear pattern error for {pattern}: {e}")
            return 0

    def append(self, key: str, value: Any) -> int:
        """Append a JSON value to a list; returns the new length"""
        try:
            if self.redis_client:
                pipe = self.redis_client.pipeline()
                pipe.rpush(key, json.dumps(value))
                pipe.expire(key, self.ttl)
                length, _ = pipe.execute()
                return int(length)
            items = self._memory_cache.setdefault(key, [])
            items.append(value)
            return len(items)
        except (redis.RedisError, TypeError) as e:
            logger.error(f"Store append error for key {key}: {e}")
            return 0

    def get_list(self, key: str) -> List[Any]:
        try:
            if self.redis_client:
                return [json.loads(item) for item in self.redis_client.lrange(key, 0, -1)]
            return list(self._memory_cache.get(key) or [])
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Store list error for key {key}: {e}")
            return []

    def ping(self) -> bool:
        if not self.redis_client:
            return True
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError:
            return False

    # ----------------- Chat sessions -----------------

    def store_message(self, session_id: str, user_id: str, role: str, content: str) -> int:
        return self.append(
            f"session:{session_id}:messages",
            {
                "id": uuid.uuid4().hex,
                "userId": user_id,
                "role": role,
                "content": content,
                "timestamp": _now_iso(),
            },
        )

    def get_session_messages(self, session_id: str) -> List[dict]:
        return self.get_list(f"session:{session_id}:messages")

    def clear_session(self, session_id: str) -> bool:
        return self.delete(f"session:{session_id}:messages")

    def store_feedback(self, response_id: str, user_id: str, is_positive: bool, feedback: Optional[str] = None) -> bool:
        return self.set(
            f"feedback:{response_id}",
            {
                "responseId": response_id,
                "userId": user_id,
                "isPositive": is_positive,
                "feedback": feedback,
                "timestamp": _now_iso(),
            },
        )

    # ----------------- Profiles -----------------

    def get_user_profile(self, user_id: str) -> Optional[dict]:
        return self.get(f"user:{user_id}:profile")

    def update_user_profile(self, user_id: str, profile: dict) -> bool:
        return self.set(f"user:{user_id}:profile", profile)

    # ----------------- Study plans -----------------

    @staticmethod
    def plan_key(user_id: str) -> str:
        return f"study_plan:{user_id}:current"

    def store_study_plan(self, user_id: str, plan: dict) -> bool:
        return self.set(self.plan_key(user_id), plan)

    def get_study_plan(self, user_id: str) -> Optional[dict]:
        return self.get(self.plan_key(user_id))

    def delete_study_plan(self, user_id: str) -> bool:
        return self.delete(self.plan_key(user_id))

    def store_progress(self, plan_id: str, user_id: str, task_id: str, completed: bool) -> int:
        return self.append(
            f"study_plan:{plan_id}:{user_id}",
            {"taskId": task_id, "completed": completed, "timestamp": _now_iso()},
        )


# Global store instance
session_store = SessionStore()


def get_session_store() -> SessionStore:
    return session_store
