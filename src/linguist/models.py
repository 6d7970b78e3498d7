from datetime import datetime
from enum import Enum, IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Enums ---
class Modality(IntEnum):
    """Question stage: multiple choice first, typed recall once recognized."""

    RECOGNITION = 0
    RECALL = 1


class ModeTag(str, Enum):
    LEARN = "learn"
    TEST = "test"
    FLASHCARDS = "flashcards"
    MEMORY = "memory"
    TIME_ATTACK = "time_attack"
    LISTENING = "listening"


class InitialOrder(str, Enum):
    SEQUENTIAL = "sequential"
    RANDOMIZED = "randomized"


# --- Vocabulary ---
class VocabularyItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    term_source: str
    term_target: str
    note: Optional[str] = None


class WordSet(BaseModel):
    id: str
    name: str
    lang_source: str
    lang_target: str
    items: List[VocabularyItem]

    def item(self, item_id: str) -> Optional[VocabularyItem]:
        for candidate in self.items:
            if candidate.id == item_id:
                return candidate
        return None


# --- Learn mode ---
class QueueEntry(BaseModel):
    entry_id: str
    item_id: str
    reverse: bool  # True: prompt with the target term, ask for the source term
    stage: Modality = Modality.RECOGNITION


class Question(BaseModel):
    entry_id: str
    item_id: str
    prompt: str
    expected_answer: str
    modality: Modality
    reverse: bool
    answer_language: str
    options: Optional[List[str]] = None


class AnswerOutcome(BaseModel):
    entry_id: str
    item_id: str
    stage: Modality
    answer: str
    expected_answer: str
    correct: bool
    fast: bool
    mastery_level: int
    next_stage: Optional[Modality] = None  # None once the item left the queue
    complete: bool = False


class SessionResult(BaseModel):
    set_id: str
    score: int
    error_count: int
    duration_seconds: int
    mode: ModeTag = ModeTag.LEARN
    date: datetime = Field(default_factory=datetime.now)


class LearnSessionState(BaseModel):
    word_set: WordSet
    order: InitialOrder
    queue: List[QueueEntry]
    position: int = 0
    levels: Dict[str, int]
    errored: List[str] = []
    wrong_attempts: int = 0
    started_at: float
    question: Optional[Question] = None
    question_issued_at: Optional[float] = None
    result: Optional[SessionResult] = None
    created_at: datetime = Field(default_factory=datetime.now)


# --- Stats ---
class SetStats(BaseModel):
    set_id: str
    attempts: int = 0
    average_score: float = 0.0
    words_learned: int = 0
    history: List[SessionResult] = []


class GlobalStats(BaseModel):
    total_sets_completed: int = 0
    total_answers: int = 0
    overall_accuracy: float = 0.0
    total_time_spent: int = 0
