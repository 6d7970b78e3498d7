"""Per-item mastery levels for one learn session.

Levels: 0 unseen or struggling, 1 recognized quickly, 2 recalled quickly
(mastered). Levels only ever go up; wrong answers flag the item instead.
"""

import logging
from typing import Dict, Iterable, Optional, Set

from .config import settings
from .models import Modality

logger = logging.getLogger(__name__)

UNSEEN = 0
RECOGNIZED = 1
MASTERED = 2


def threshold_ms(stage: Modality) -> int:
    if stage == Modality.RECALL:
        return settings.RECALL_THRESHOLD_MS
    return settings.RECOGNITION_THRESHOLD_MS


def is_fast(stage: Modality, elapsed_ms: Optional[float]) -> bool:
    """A missing or negative reading never counts as fast."""
    if elapsed_ms is None or elapsed_ms < 0:
        return False
    return elapsed_ms <= threshold_ms(stage)


class MasteryTracker:
    def __init__(
        self,
        item_ids: Iterable[str],
        levels: Optional[Dict[str, int]] = None,
        errored: Optional[Iterable[str]] = None,
        wrong_attempts: int = 0,
    ):
        self.levels: Dict[str, int] = {item_id: UNSEEN for item_id in item_ids}
        if levels:
            self.levels.update(levels)
        self.errored: Set[str] = set(errored or ())
        self.wrong_attempts = wrong_attempts

    def level(self, item_id: str) -> int:
        return self.levels[item_id]

    def record_outcome(
        self,
        item_id: str,
        stage: Modality,
        correct: bool,
        elapsed_ms: Optional[float],
    ) -> int:
        """Apply one evaluated answer and return the item's level afterwards."""
        current = self.levels[item_id]
        if not correct:
            self.errored.add(item_id)
            self.wrong_attempts += 1
            return current

        if not is_fast(stage, elapsed_ms):
            return current

        earned = MASTERED if stage == Modality.RECALL else RECOGNIZED
        new_level = max(current, earned)
        if new_level != current:
            logger.debug(f"Item {item_id}: level {current} -> {new_level}")
        self.levels[item_id] = new_level
        return new_level

    def is_session_complete(self) -> bool:
        return all(level == MASTERED for level in self.levels.values())

    def mastered_count(self) -> int:
        return sum(1 for level in self.levels.values() if level == MASTERED)

    def error_count(self) -> int:
        return len(self.errored)
