"""Aggregate statistics for finished sessions.

The learn session only knows the ``StatsRecorder`` protocol; the redis-backed
recorder keeps a capped, newest-first history per set plus global totals.
"""

import logging
from typing import Callable, Optional, Protocol

from .config import settings
from .models import GlobalStats, ModeTag, SessionResult, SetStats

logger = logging.getLogger(__name__)


class StatsRecorder(Protocol):
    def record_session_result(
        self,
        set_id: str,
        score: int,
        error_count: int,
        duration_seconds: int,
        mode: ModeTag,
    ) -> None: ...


class RedisStatsRecorder:
    def __init__(
        self,
        client,
        set_size: Optional[Callable[[str], int]] = None,
        history_limit: int = settings.STATS_HISTORY_LIMIT,
        prefix: str = settings.STATS_KEY_PREFIX,
    ):
        self.client = client
        self.set_size = set_size or (lambda set_id: 0)
        self.history_limit = history_limit
        self.prefix = prefix

    def _set_key(self, set_id: str) -> str:
        return f"{self.prefix}:set:{set_id}"

    def _global_key(self) -> str:
        return f"{self.prefix}:global"

    def get_set_stats(self, set_id: str) -> SetStats:
        raw = self.client.get(self._set_key(set_id))
        if not raw:
            return SetStats(set_id=set_id)
        return SetStats.model_validate_json(raw)

    def get_global_stats(self) -> GlobalStats:
        raw = self.client.get(self._global_key())
        if not raw:
            return GlobalStats()
        return GlobalStats.model_validate_json(raw)

    def record_session_result(
        self,
        set_id: str,
        score: int,
        error_count: int,
        duration_seconds: int,
        mode: ModeTag,
    ) -> None:
        result = SessionResult(
            set_id=set_id,
            score=score,
            error_count=error_count,
            duration_seconds=duration_seconds,
            mode=mode,
        )
        size = self.set_size(set_id)

        current = self.get_set_stats(set_id)
        attempts = current.attempts + 1
        current.average_score = (
            current.average_score * current.attempts + score
        ) / attempts
        current.attempts = attempts
        current.history = [result] + current.history[: self.history_limit - 1]
        if mode == ModeTag.LEARN:
            # a finished learn session means every word in the set was mastered
            current.words_learned = max(current.words_learned, size)
        self.client.set(self._set_key(set_id), current.model_dump_json())

        totals = self.get_global_stats()
        total_answers = totals.total_answers + size
        if total_answers:
            totals.overall_accuracy = (
                totals.overall_accuracy * totals.total_answers + score * size
            ) / total_answers
        else:
            totals.overall_accuracy = float(score)
        totals.total_answers = total_answers
        totals.total_sets_completed += 1
        totals.total_time_spent += duration_seconds
        self.client.set(self._global_key(), totals.model_dump_json())

        logger.info(
            f"Recorded {mode.value} result for {set_id}: "
            f"score={score} errors={error_count} duration={duration_seconds}s"
        )
