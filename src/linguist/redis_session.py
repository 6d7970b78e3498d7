from datetime import datetime, timedelta
from typing import Optional

import redis

from .config import settings
from .models import LearnSessionState

redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis():
    return redis_client


class LearnSessionStore:
    """Learn session snapshots keyed by the session cookie value."""

    def __init__(self, client, timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES):
        self.client = client
        self.timeout = timedelta(minutes=timeout_minutes)

    def save(self, session_id: str, state: LearnSessionState) -> None:
        self.client.set(session_id, state.model_dump_json(), ex=self.timeout)

    def load(self, session_id: str) -> Optional[LearnSessionState]:
        raw = self.client.get(session_id)
        if not raw:
            return None

        state = LearnSessionState.model_validate_json(raw)
        if datetime.now() - state.created_at > self.timeout:
            self.client.delete(session_id)
            return None
        return state

    def delete(self, session_id: str) -> None:
        self.client.delete(session_id)
