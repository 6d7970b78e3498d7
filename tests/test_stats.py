from __future__ import annotations

from linguist.models import GlobalStats, ModeTag, SetStats
from linguist.stats import RedisStatsRecorder


def test_first_result_creates_set_and_global_stats(redis_double) -> None:
    recorder = RedisStatsRecorder(redis_double, set_size=lambda set_id: 4)

    recorder.record_session_result("pets", 75, 1, 42, ModeTag.LEARN)

    pets = recorder.get_set_stats("pets")
    assert pets.attempts == 1
    assert pets.average_score == 75
    assert pets.words_learned == 4
    assert pets.history[0].score == 75
    assert pets.history[0].error_count == 1
    assert pets.history[0].duration_seconds == 42

    totals = recorder.get_global_stats()
    assert totals == GlobalStats(
        total_sets_completed=1,
        total_answers=4,
        overall_accuracy=75.0,
        total_time_spent=42,
    )


def test_running_average_and_weighted_accuracy(redis_double) -> None:
    sizes = {"pets": 2, "food": 6}
    recorder = RedisStatsRecorder(redis_double, set_size=sizes.__getitem__)

    recorder.record_session_result("pets", 100, 0, 10, ModeTag.LEARN)
    recorder.record_session_result("pets", 50, 1, 20, ModeTag.LEARN)
    recorder.record_session_result("food", 0, 6, 30, ModeTag.LEARN)

    assert recorder.get_set_stats("pets").average_score == 75
    totals = recorder.get_global_stats()
    assert totals.total_answers == 10
    assert totals.overall_accuracy == (100 * 2 + 50 * 2 + 0 * 6) / 10
    assert totals.total_time_spent == 60
    assert totals.total_sets_completed == 3


def test_history_is_newest_first_and_capped(redis_double) -> None:
    recorder = RedisStatsRecorder(redis_double, history_limit=3)

    for score in range(5):
        recorder.record_session_result("pets", score, 0, 1, ModeTag.LEARN)

    history = recorder.get_set_stats("pets").history
    assert [entry.score for entry in history] == [4, 3, 2]


def test_unknown_set_has_empty_stats(redis_double) -> None:
    recorder = RedisStatsRecorder(redis_double)

    assert recorder.get_set_stats("nothing") == SetStats(set_id="nothing")
