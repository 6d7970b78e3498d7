import glob
import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from .config import settings
from .models import VocabularyItem, WordSet

logger = logging.getLogger(__name__)


def _frame_to_items(df: pd.DataFrame) -> List[VocabularyItem]:
    has_note = "note" in df.columns
    items = []
    for position, row in enumerate(df.to_dict("records"), start=1):
        note = row.get("note") if has_note else None
        if note is not None and pd.isna(note):
            note = None
        items.append(
            VocabularyItem(
                id=str(position),
                term_source=str(row["word"]),
                term_target=str(row["translation"]),
                note=str(note) if note is not None else None,
            )
        )
    return items


def _column_label(df: pd.DataFrame, column: str) -> Optional[str]:
    """First non-empty value of an optional per-set column."""
    if column not in df.columns:
        return None
    values = df[column].dropna().astype(str).str.strip()
    values = values[values != ""]
    return values.iloc[0] if not values.empty else None


# --- Service Layer: Vocabulary Management ---
class VocabularyManager:
    """Manages loading and accessing vocabulary sets."""

    def __init__(
        self,
        directory: str,
        lang_source: str = settings.DEFAULT_LANG_SOURCE,
        lang_target: str = settings.DEFAULT_LANG_TARGET,
    ):
        self.directory = directory
        self.lang_source = lang_source
        self.lang_target = lang_target
        self.vocab_sets: Dict[str, WordSet] = {}
        self.load_all()

    def _make_set(self, set_id: str, df: pd.DataFrame) -> WordSet:
        """Language names come from the lang_source/lang_target columns when present."""
        return WordSet(
            id=set_id,
            name=set_id.replace("_", " ").title(),
            lang_source=_column_label(df, "lang_source") or self.lang_source,
            lang_target=_column_label(df, "lang_target") or self.lang_target,
            items=_frame_to_items(df),
        )

    def load_all(self):
        self.vocab_sets = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")
            return

        csv_files = glob.glob(os.path.join(self.directory, "*.csv"))
        for file_path in csv_files:
            try:
                file_name = os.path.splitext(os.path.basename(file_path))[0]
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
                if "word" in df.columns and "translation" in df.columns:
                    df = df.dropna(subset=["word", "translation"])
                    self.vocab_sets[file_name] = self._make_set(file_name, df)
                    logger.info(f"Loaded {len(df)} words from {file_name}")
                else:
                    logger.error(f"Skipping {file_name}: Missing columns.")
            except (OSError, ValueError, pd.errors.ParserError) as e:
                logger.error(f"Failed to load {file_path}: {e}")

        if not self.vocab_sets:
            logger.warning("No CSV files found. Loading dummy data.")
            dummy = pd.DataFrame(
                {
                    "word": ["Hund", "Katze", "Baum", "Haus", "Wasser"],
                    "translation": ["dog", "cat", "tree", "house", "water"],
                    "lang_source": ["German"] * 5,
                    "lang_target": ["English"] * 5,
                }
            )
            self.vocab_sets["default_dummy"] = self._make_set("default_dummy", dummy)

    def get_set(self, topic: str) -> Optional[WordSet]:
        return self.vocab_sets.get(topic)

    def get_words(self, topic: str) -> List[VocabularyItem]:
        word_set = self.vocab_sets.get(topic)
        return list(word_set.items) if word_set else []

    def get_topics(self) -> List[Dict[str, Any]]:
        topics = []
        for key, word_set in self.vocab_sets.items():
            topics.append({"id": key, "name": word_set.name, "count": len(word_set.items)})
        topics.sort(key=lambda x: x["name"])
        return topics
