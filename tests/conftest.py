from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from linguist.models import VocabularyItem, WordSet


class InMemoryRedis:
    """Dict-backed stand-in for the few redis commands the app uses."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.expiries: Dict[str, object] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str, ex=None) -> bool:
        self.data[key] = value
        self.expiries[key] = ex
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingStats:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def record_session_result(self, set_id, score, error_count, duration_seconds, mode) -> None:
        self.calls.append((set_id, score, error_count, duration_seconds, mode))


def make_word_set(pairs: List[tuple], set_id: str = "animals") -> WordSet:
    return WordSet(
        id=set_id,
        name=set_id.title(),
        lang_source="German",
        lang_target="English",
        items=[
            VocabularyItem(id=str(i), term_source=src, term_target=dst)
            for i, (src, dst) in enumerate(pairs, start=1)
        ],
    )


@pytest.fixture
def redis_double() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stats() -> RecordingStats:
    return RecordingStats()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def single_item_set() -> WordSet:
    return make_word_set([("Hund", "dog")])


@pytest.fixture
def animals() -> WordSet:
    return make_word_set(
        [
            ("Hund", "dog"),
            ("Katze", "cat"),
            ("Maus", "mouse"),
            ("Vogel", "bird"),
            ("Pferd", "horse"),
        ]
    )


@pytest.fixture
def vocab_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "vocabulary"
    directory.mkdir()
    (directory / "pets.csv").write_text(
        "word,translation,note\nHund,dog,\nKatze,cat,feline\n", encoding="utf-8"
    )
    (directory / "one_word.csv").write_text(
        "word,translation\nBaum,tree\n", encoding="utf-8"
    )
    return directory
