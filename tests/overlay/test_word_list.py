import json
import random
import threading

import pytest

from overlay.translation.factory import create_strategy
from overlay.translation.strategies import DictionaryStrategy, PatternSubstitutionStrategy
from overlay.translation.word_list import DictionaryStore


@pytest.fixture
def store(tmp_path):
    (tmp_path / "swedish.json").write_text(
        json.dumps({"Dog": "hund", " cat ": "katt", "": "ignored"}), encoding="utf-8"
    )
    (tmp_path / "german.json").write_text(json.dumps({"dog": "Hund"}), encoding="utf-8")
    return DictionaryStore(tmp_path)


def test_get_normalizes_keys_and_is_read_only(store):
    dictionary = store.get("swedish")

    assert dict(dictionary) == {"dog": "hund", "cat": "katt"}
    with pytest.raises(TypeError):
        dictionary["bird"] = "fågel"


def test_get_caches_after_first_load(store):
    first = store.get("swedish")
    second = store.get("swedish")

    assert first is second
    assert store.load_count == 1


def test_missing_language_raises_key_error(store):
    with pytest.raises(KeyError):
        store.get("klingon")


def test_available_languages_and_preload(store):
    assert store.available_languages() == ["german", "swedish"]
    store.preload()
    assert store.load_count == 2


def test_concurrent_first_use_loads_once(store):
    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(store.get("swedish"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.load_count == 1
    assert all(r is results[0] for r in results)


def test_bundled_word_lists_cover_every_language():
    bundled = DictionaryStore()
    assert bundled.available_languages() == [
        "danish", "dutch", "french", "german", "italian", "norwegian", "spanish", "swedish",
    ]
    assert bundled.get("swedish")["dog"] == "hund"


def test_create_strategy_by_name(store):
    pattern = create_strategy("pattern", "Swedish", word_inclusion_probability=1.0, ending_probability=0.0)
    assert isinstance(pattern, PatternSubstitutionStrategy)
    assert pattern.transform("the", random.Random(0)).translated == "te"

    dictionary = create_strategy("dictionary", "german", word_inclusion_probability=1.0, store=store)
    assert isinstance(dictionary, DictionaryStrategy)
    assert dictionary.transform("My dog", random.Random(0)).translated == "My Hund"


def test_create_strategy_rejects_unknowns(store):
    with pytest.raises(ValueError):
        create_strategy("babelfish", "swedish")
    with pytest.raises(KeyError):
        create_strategy("dictionary", "italian", store=store)


def test_min_word_length_only_gates_the_pattern_strategy(store):
    pattern = create_strategy("pattern", "swedish", word_inclusion_probability=1.0,
                              ending_probability=0.0, min_word_length=4, store=store)
    assert pattern.transform("the", random.Random(0)).translated == "the"

    dictionary = create_strategy("dictionary", "german", word_inclusion_probability=1.0,
                                 min_word_length=4, store=store)
    assert dictionary.transform("My dog", random.Random(0)).translated == "My Hund"
