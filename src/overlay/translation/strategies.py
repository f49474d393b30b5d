# src/overlay/translation/strategies.py
import abc
import logging
import random
import re
from typing import Dict, List, Mapping, Optional

from overlay.model import Fragment, TransformationPolicy, TransformationResult, TranslationPair

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"\w+")


def match_capitalization(source: str, transformed: str) -> str:
    """Upper-cases the first letter of `transformed` when `source` starts uppercase."""
    if source[:1].isupper() and transformed:
        return transformed[0].upper() + transformed[1:]
    return transformed


class TransformationStrategy(metaclass=abc.ABCMeta):
    """
    Rewrites the words of one text segment.

    Randomness comes only from the `rng` passed to `transform`, so a seeded
    random.Random reproduces a run exactly.
    """
    name: str

    def __init__(self, word_inclusion_probability: float = 0.5):
        self.word_inclusion_probability = word_inclusion_probability

    @abc.abstractmethod
    def transform(self, text: str, rng: random.Random) -> TransformationResult:
        raise NotImplementedError

    def _include(self, rng: random.Random) -> bool:
        return rng.random() < self.word_inclusion_probability

    @staticmethod
    def _fragments(text: str, substitutions: Dict[int, Fragment]) -> List[Fragment]:
        """
        Interleaves substituted words (keyed by match start) with the
        untouched text around them.
        """
        fragments: List[Fragment] = []
        cursor = 0
        for start in sorted(substitutions):
            word_fragment = substitutions[start]
            if start > cursor:
                fragments.append(Fragment(text=text[cursor:start]))
            fragments.append(word_fragment)
            cursor = start + len(word_fragment.original)
        if cursor < len(text):
            fragments.append(Fragment(text=text[cursor:]))
        return fragments


class PatternSubstitutionStrategy(TransformationStrategy):
    """
    Pseudo-translation by ordered substring rules plus an optional ending.
    Each word gets its own inclusion draw, so repeated words can differ.
    """
    name = "pattern"

    def __init__(self, policy: TransformationPolicy):
        super().__init__(policy.word_inclusion_probability)
        self.policy = policy

    def transform_word(self, word: str, rng: random.Random) -> str:
        transformed = word.lower()

        for match_literal, replacement in self.policy.substitution_rules:
            transformed = transformed.replace(match_literal, replacement)

        if self.policy.ending_suffixes and rng.random() < self.policy.ending_probability:
            transformed += rng.choice(self.policy.ending_suffixes)

        return match_capitalization(word, transformed)

    def transform(self, text: str, rng: random.Random) -> TransformationResult:
        substitutions: Dict[int, Fragment] = {}
        pairs: List[TranslationPair] = []

        for match in WORD_PATTERN.finditer(text):
            word = match.group(0)
            # Short words are never drawn for, so they consume no randomness
            if len(word) < self.policy.min_word_length or not self._include(rng):
                continue
            transformed = self.transform_word(word, rng)
            if transformed == word:
                continue
            substitutions[match.start()] = Fragment(text=transformed, original=word)
            pairs.append(TranslationPair(original=word, translated=transformed))

        return TransformationResult(
            original=text,
            fragments=self._fragments(text, substitutions),
            pairs=pairs,
        )


class DictionaryStrategy(TransformationStrategy):
    """
    Word-list translation. Every unique word found in the dictionary gets one
    inclusion draw per segment, and all its occurrences are rewritten the same way.
    The word list alone decides what is translatable, so short entries count too.
    """
    name = "dictionary"

    def __init__(
            self,
            dictionary: Mapping[str, str],
            word_inclusion_probability: float = 0.5,
    ):
        super().__init__(word_inclusion_probability)
        self.dictionary = dictionary

    def transform(self, text: str, rng: random.Random) -> TransformationResult:
        matches = list(WORD_PATTERN.finditer(text))

        # 1. Decide per unique word, in order of first appearance
        included: Dict[str, str] = {}
        seen = set()
        for match in matches:
            key = match.group(0).lower()
            if key in seen:
                continue
            seen.add(key)
            target: Optional[str] = self.dictionary.get(key)
            if target is None or target == key:
                continue
            if self._include(rng):
                included[key] = target

        # 2. One replacement pass over the whole segment
        substitutions: Dict[int, Fragment] = {}
        for match in matches:
            word = match.group(0)
            target = included.get(word.lower())
            if target is not None:
                substitutions[match.start()] = Fragment(
                    text=match_capitalization(word, target), original=word
                )

        pairs = [TranslationPair(original=key, translated=target) for key, target in included.items()]
        return TransformationResult(
            original=text,
            fragments=self._fragments(text, substitutions),
            pairs=pairs,
        )
