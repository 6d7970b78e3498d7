from __future__ import annotations

import random
from datetime import datetime, timedelta

from linguist.redis_session import LearnSessionStore
from linguist.session import LearnSession


def test_save_and_load_with_expiry(redis_double, animals) -> None:
    store = LearnSessionStore(redis_double, timeout_minutes=30)
    state = LearnSession.start(animals, rng=random.Random(0)).to_state()

    store.save("abc", state)

    assert redis_double.expiries["abc"] == timedelta(minutes=30)
    assert store.load("abc") == state
    assert store.load("unknown") is None


def test_stale_session_is_dropped(redis_double, animals) -> None:
    store = LearnSessionStore(redis_double, timeout_minutes=30)
    state = LearnSession.start(animals, rng=random.Random(0)).to_state()
    state.created_at = datetime.now() - timedelta(minutes=31)
    store.save("abc", state)

    assert store.load("abc") is None
    assert "abc" not in redis_double.data


def test_delete(redis_double, animals) -> None:
    store = LearnSessionStore(redis_double)
    store.save("abc", LearnSession.start(animals).to_state())

    store.delete("abc")

    assert store.load("abc") is None
