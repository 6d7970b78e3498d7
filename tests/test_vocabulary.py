from __future__ import annotations

from linguist.vocabulary import VocabularyManager


def test_loads_every_csv_as_a_word_set(vocab_dir) -> None:
    manager = VocabularyManager(str(vocab_dir), lang_source="German", lang_target="English")

    pets = manager.get_set("pets")
    assert pets.name == "Pets"
    assert pets.lang_source == "German"
    assert [(i.id, i.term_source, i.term_target) for i in pets.items] == [
        ("1", "Hund", "dog"),
        ("2", "Katze", "cat"),
    ]
    assert pets.items[0].note is None
    assert pets.items[1].note == "feline"


def test_topics_are_sorted_by_display_name(vocab_dir) -> None:
    manager = VocabularyManager(str(vocab_dir))

    assert manager.get_topics() == [
        {"id": "one_word", "name": "One Word", "count": 1},
        {"id": "pets", "name": "Pets", "count": 2},
    ]


def test_files_without_required_columns_are_skipped(vocab_dir) -> None:
    (vocab_dir / "broken.csv").write_text("foo,bar\n1,2\n", encoding="utf-8")

    manager = VocabularyManager(str(vocab_dir))

    assert manager.get_set("broken") is None
    assert manager.get_words("broken") == []


def test_missing_directory_is_created_and_left_empty(tmp_path) -> None:
    target = tmp_path / "nowhere"

    manager = VocabularyManager(str(target))

    assert target.is_dir()
    assert manager.get_topics() == []


def test_empty_directory_falls_back_to_dummy_set(tmp_path) -> None:
    manager = VocabularyManager(str(tmp_path))

    words = manager.get_words("default_dummy")
    assert len(words) == 5
    assert words[0].term_source == "Hund"
    assert words[0].term_target == "dog"


def test_language_names_are_read_per_set(vocab_dir) -> None:
    (vocab_dir / "phrases.csv").write_text(
        "word,translation,lang_source,lang_target\n"
        "Cześć,Hello,Polski,Angielski\n"
        "Tak,Yes,,\n",
        encoding="utf-8",
    )
    (vocab_dir / "colours.csv").write_text(
        "word,translation,lang_source\nrojo,red, Español \n", encoding="utf-8"
    )

    manager = VocabularyManager(str(vocab_dir), lang_source="German", lang_target="English")

    phrases = manager.get_set("phrases")
    assert (phrases.lang_source, phrases.lang_target) == ("Polski", "Angielski")
    assert len(phrases.items) == 2
    colours = manager.get_set("colours")
    assert (colours.lang_source, colours.lang_target) == ("Español", "English")
    # sets without the columns keep the manager defaults
    pets = manager.get_set("pets")
    assert (pets.lang_source, pets.lang_target) == ("German", "English")


def test_dummy_set_names_its_languages(tmp_path) -> None:
    dummy = VocabularyManager(str(tmp_path)).get_set("default_dummy")

    assert (dummy.lang_source, dummy.lang_target) == ("German", "English")
