import random
from typing import Iterable, List, Optional

from .models import Modality, Question, QueueEntry, VocabularyItem, WordSet
from .scheduler import QueueIntegrityError

NUM_DISTRACTORS = 3


def select_distractors(
    correct_answer: str,
    candidates: Iterable[str],
    rng: Optional[random.Random] = None,
    count: int = NUM_DISTRACTORS,
) -> List[str]:
    """Pick up to ``count`` distinct wrong answers from ``candidates``."""
    rng = rng or random.Random()
    pool = set(candidates)
    pool.discard(correct_answer)
    # sorted so a seeded rng gives the same pick regardless of set ordering
    return rng.sample(sorted(pool), min(count, len(pool)))


def answer_term(item: VocabularyItem, reverse: bool) -> str:
    return item.term_source if reverse else item.term_target


def prompt_term(item: VocabularyItem, reverse: bool) -> str:
    return item.term_target if reverse else item.term_source


# --- Question Generation ---
class QuestionGenerator:
    """Turns queue entries into questions against one word set."""

    def __init__(self, word_set: WordSet, rng: Optional[random.Random] = None):
        self.word_set = word_set
        self.rng = rng or random.Random()

    def generate(self, entry: QueueEntry) -> Question:
        item = self.word_set.item(entry.item_id)
        if item is None:
            raise QueueIntegrityError(
                f"Entry {entry.entry_id} references unknown item {entry.item_id}"
            )

        expected = answer_term(item, entry.reverse)
        options = None
        if entry.stage == Modality.RECOGNITION:
            options = self._generate_options(item, entry.reverse)

        return Question(
            entry_id=entry.entry_id,
            item_id=item.id,
            prompt=prompt_term(item, entry.reverse),
            expected_answer=expected,
            modality=entry.stage,
            reverse=entry.reverse,
            answer_language=(
                self.word_set.lang_source if entry.reverse else self.word_set.lang_target
            ),
            options=options,
        )

    def _generate_options(self, item: VocabularyItem, reverse: bool) -> List[str]:
        correct = answer_term(item, reverse)
        others = (
            answer_term(other, reverse)
            for other in self.word_set.items
            if other.id != item.id
        )
        options = [correct] + select_distractors(correct, others, self.rng)
        self.rng.shuffle(options)
        return options


# --- Answer Evaluation ---
def normalize_answer(text: str) -> str:
    return text.strip().casefold()


def evaluate_answer(question: Question, answer: str) -> bool:
    """Recall answers match after trimming and case-folding; choices must be identical."""
    if question.modality == Modality.RECALL:
        return normalize_answer(answer) == normalize_answer(question.expected_answer)
    return answer == question.expected_answer
