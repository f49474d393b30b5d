# src/overlay/translation/factory.py
from typing import Optional

from overlay.translation.languages import build_policy, normalize_language
from overlay.translation.strategies import DictionaryStrategy, PatternSubstitutionStrategy, TransformationStrategy
from overlay.translation.word_list import DictionaryStore, dictionary_store

STRATEGY_NAMES = ("pattern", "dictionary")


def create_strategy(
        name: str,
        language: str,
        word_inclusion_probability: float = 0.5,
        ending_probability: float = 0.3,
        min_word_length: int = 3,
        store: Optional[DictionaryStore] = None,
) -> TransformationStrategy:
    """
    Builds the transformation strategy for a language.

    Raises:
        ValueError: On an unknown strategy name.
        KeyError: When the language has no pattern table or word list.
    """
    language = normalize_language(language)

    if name == "pattern":
        policy = build_policy(
            language,
            word_inclusion_probability=word_inclusion_probability,
            ending_probability=ending_probability,
            min_word_length=min_word_length,
        )
        return PatternSubstitutionStrategy(policy)

    if name == "dictionary":
        dictionary = (store or dictionary_store).get(language)
        return DictionaryStrategy(
            dictionary,
            word_inclusion_probability=word_inclusion_probability,
        )

    raise ValueError(f"Unknown transformation strategy '{name}'. Choose from: {', '.join(STRATEGY_NAMES)}")
