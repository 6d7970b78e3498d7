import logging
import random
import time
from typing import Any, Callable, Dict, Optional

from .mastery import MasteryTracker, is_fast
from .models import (
    AnswerOutcome,
    InitialOrder,
    LearnSessionState,
    ModeTag,
    Question,
    SessionResult,
    WordSet,
)
from .quiz import QuestionGenerator, evaluate_answer
from .scheduler import QueueIntegrityError, QueueScheduler
from .stats import StatsRecorder

logger = logging.getLogger(__name__)

MODE = ModeTag.LEARN


class EmptyWordSetError(ValueError):
    """A learn session needs at least one vocabulary item."""


class SessionFinishedError(RuntimeError):
    """Raised when answering a session that is complete or abandoned."""


class StaleAnswerError(RuntimeError):
    """The answer names a queue entry that is no longer the current one."""


def compute_score(total_items: int, error_count: int) -> int:
    """Percentage of items never answered wrongly, rounded half up."""
    return (200 * (total_items - error_count) + total_items) // (2 * total_items)


class LearnSession:
    """One run of the adaptive learn mode over a word set.

    Callers poll ``current_question()`` and answer with ``submit_answer()``
    until ``is_complete()``. The whole session can be snapshotted with
    ``to_state()`` and rebuilt from that snapshot between requests.
    """

    def __init__(
        self,
        state: LearnSessionState,
        stats_recorder: Optional[StatsRecorder] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.stats_recorder = stats_recorder
        self.clock = clock
        self.rng = rng or random.Random()
        self.abandoned = False

        self.generator = QuestionGenerator(state.word_set, self.rng)
        self.scheduler = QueueScheduler(state.queue, state.position)
        self.tracker = MasteryTracker(
            (item.id for item in state.word_set.items),
            levels=state.levels,
            errored=state.errored,
            wrong_attempts=state.wrong_attempts,
        )

    @classmethod
    def start(
        cls,
        word_set: WordSet,
        order: InitialOrder = InitialOrder.RANDOMIZED,
        stats_recorder: Optional[StatsRecorder] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> "LearnSession":
        if not word_set.items:
            raise EmptyWordSetError(f"Word set {word_set.id} has no items")

        rng = rng or random.Random()
        scheduler = QueueScheduler.seeded(
            (item.id for item in word_set.items), order, rng
        )
        state = LearnSessionState(
            word_set=word_set,
            order=order,
            queue=scheduler.queue,
            position=scheduler.position,
            levels={item.id: 0 for item in word_set.items},
            started_at=clock(),
        )
        session = cls(state, stats_recorder=stats_recorder, clock=clock, rng=rng)
        session.current_question()
        logger.info(
            f"Learn session started [Set: {word_set.id}, "
            f"Items: {len(word_set.items)}, Order: {order.value}]"
        )
        return session

    # --- Queries ---
    def current_question(self) -> Optional[Question]:
        """The question for the head entry; stable until it is answered."""
        if self.abandoned:
            return None
        entry = self.scheduler.current()
        if entry is None:
            return None
        question = self.state.question
        if question is None or question.entry_id != entry.entry_id:
            question = self.generator.generate(entry)
            self.state.question = question
            self.state.question_issued_at = self.clock()
        return question

    def is_complete(self) -> bool:
        return self.state.result is not None

    @property
    def result(self) -> Optional[SessionResult]:
        return self.state.result

    def measured_elapsed_ms(self) -> Optional[float]:
        """Milliseconds since the current question was issued, None if unusable."""
        issued = self.state.question_issued_at
        if issued is None:
            return None
        elapsed = (self.clock() - issued) * 1000
        if elapsed < 0:
            return None
        return elapsed

    def progress(self) -> Dict[str, Any]:
        return {
            "total_items": len(self.state.word_set.items),
            "mastered": self.tracker.mastered_count(),
            "remaining_entries": self.scheduler.remaining(),
            "error_count": self.tracker.error_count(),
            "wrong_attempts": self.tracker.wrong_attempts,
            "complete": self.is_complete(),
        }

    # --- Commands ---
    def submit_answer(
        self,
        answer: str,
        elapsed_ms: Optional[float] = None,
        entry_id: Optional[str] = None,
    ) -> AnswerOutcome:
        """Grade ``answer`` for the current question and reschedule its item.

        ``elapsed_ms`` of None (no usable clock reading) is treated as too slow
        for either latency gate. When ``entry_id`` is given it must name the
        current question, so a repeated submission cannot grade the next one.
        """
        if self.abandoned or self.is_complete():
            raise SessionFinishedError("Session is no longer accepting answers")

        question = self.current_question()
        if question is None:
            raise QueueIntegrityError("Queue drained without a session result")
        if entry_id is not None and entry_id != question.entry_id:
            raise StaleAnswerError(f"Entry {entry_id} was already answered")

        correct = evaluate_answer(question, answer)
        fast = is_fast(question.modality, elapsed_ms)
        level = self.tracker.record_outcome(
            question.item_id, question.modality, correct, elapsed_ms
        )
        successor = self.scheduler.advance(correct, fast)
        self._sync_state()

        if self.scheduler.is_exhausted():
            self._finish()
        else:
            self.current_question()

        return AnswerOutcome(
            entry_id=question.entry_id,
            item_id=question.item_id,
            stage=question.modality,
            answer=answer,
            expected_answer=question.expected_answer,
            correct=correct,
            fast=fast,
            mastery_level=level,
            next_stage=successor.stage if successor else None,
            complete=self.is_complete(),
        )

    def abandon(self) -> None:
        """Drop all working state; nothing is reported for an abandoned session."""
        self.abandoned = True
        self.scheduler = QueueScheduler([])
        self.tracker = MasteryTracker(())
        self.state.question = None
        self._sync_state()
        logger.info(f"Learn session abandoned [Set: {self.state.word_set.id}]")

    def to_state(self) -> LearnSessionState:
        self._sync_state()
        return self.state

    # --- Internals ---
    def _sync_state(self) -> None:
        self.state.queue = self.scheduler.queue
        self.state.position = self.scheduler.position
        self.state.levels = dict(self.tracker.levels)
        self.state.errored = sorted(self.tracker.errored)
        self.state.wrong_attempts = self.tracker.wrong_attempts

    def _finish(self) -> None:
        if not self.tracker.is_session_complete():
            raise QueueIntegrityError("Queue drained before every item was mastered")

        total = len(self.state.word_set.items)
        errors = self.tracker.error_count()
        duration = int(max(0.0, self.clock() - self.state.started_at))
        result = SessionResult(
            set_id=self.state.word_set.id,
            score=compute_score(total, errors),
            error_count=errors,
            duration_seconds=duration,
            mode=MODE,
        )
        self.state.result = result
        self.state.question = None
        self.state.question_issued_at = None

        logger.info(
            f"Learn session complete [Set: {result.set_id}, Score: {result.score}, "
            f"Errors: {result.error_count}, Duration: {result.duration_seconds}s]"
        )
        if self.stats_recorder is not None:
            self.stats_recorder.record_session_result(
                result.set_id,
                result.score,
                result.error_count,
                result.duration_seconds,
                result.mode,
            )
