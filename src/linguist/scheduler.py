"""Queue scheduler for the learn mode.

The queue is scanned strictly forward. Every consumed entry is either retired
(the item was recalled quickly) or followed by exactly one new entry appended
to the tail with its direction flipped, so pending items always come up
before a repeated one resurfaces.
"""

import logging
import random
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from .models import InitialOrder, Modality, QueueEntry

logger = logging.getLogger(__name__)


class QueueIntegrityError(RuntimeError):
    """The queue no longer matches the word set or the mastery state."""


# (stage, correct, fast) -> stage of the reinserted entry, None retires the item.
# Speed is irrelevant for wrong answers, they are always looked up with fast=False.
REINSERT_POLICY: Dict[Tuple[Modality, bool, bool], Optional[Modality]] = {
    (Modality.RECOGNITION, True, True): Modality.RECALL,
    (Modality.RECOGNITION, True, False): Modality.RECOGNITION,
    (Modality.RECOGNITION, False, False): Modality.RECOGNITION,
    (Modality.RECALL, True, True): None,
    (Modality.RECALL, True, False): Modality.RECALL,
    (Modality.RECALL, False, False): Modality.RECOGNITION,
}


def new_entry_id() -> str:
    return uuid.uuid4().hex


def next_stage(stage: Modality, correct: bool, fast: bool) -> Optional[Modality]:
    return REINSERT_POLICY[(stage, correct, correct and fast)]


class QueueScheduler:
    def __init__(self, queue: List[QueueEntry], position: int = 0):
        self.queue = queue
        self.position = position

    @classmethod
    def seeded(
        cls,
        item_ids: Iterable[str],
        order: InitialOrder = InitialOrder.RANDOMIZED,
        rng: Optional[random.Random] = None,
    ) -> "QueueScheduler":
        """One recognition entry per item, each starting in a random direction."""
        rng = rng or random.Random()
        ids = list(item_ids)
        if order == InitialOrder.RANDOMIZED:
            rng.shuffle(ids)
        queue = [
            QueueEntry(
                entry_id=new_entry_id(),
                item_id=item_id,
                reverse=rng.random() < 0.5,
                stage=Modality.RECOGNITION,
            )
            for item_id in ids
        ]
        return cls(queue)

    def current(self) -> Optional[QueueEntry]:
        if self.is_exhausted():
            return None
        entry = self.queue[self.position]
        if not entry.item_id:
            raise QueueIntegrityError(f"Entry {entry.entry_id} has no item reference")
        return entry

    def is_exhausted(self) -> bool:
        return self.position >= len(self.queue)

    def remaining(self) -> int:
        return max(0, len(self.queue) - self.position)

    def advance(self, correct: bool, fast: bool) -> Optional[QueueEntry]:
        """Consume the current entry and return its successor, if any."""
        entry = self.current()
        if entry is None:
            raise QueueIntegrityError("No current entry to consume")

        stage = next_stage(entry.stage, correct, fast)
        successor = None
        if stage is not None:
            successor = QueueEntry(
                entry_id=new_entry_id(),
                item_id=entry.item_id,
                reverse=not entry.reverse,
                stage=stage,
            )
            self.queue.append(successor)
        self.position += 1

        logger.debug(
            f"Entry {entry.entry_id} (item {entry.item_id}, stage {int(entry.stage)}) "
            f"correct={correct} fast={fast} -> "
            f"{'retired' if successor is None else f'stage {int(successor.stage)}'}"
        )
        return successor
