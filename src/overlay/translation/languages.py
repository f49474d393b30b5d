# src/overlay/translation/languages.py
from typing import Dict, List, Optional, Tuple

from overlay.model import TransformationPolicy

# Substring rules are applied in order; later rules see the output of earlier ones.
LANGUAGE_PATTERNS: Dict[str, Dict[str, List]] = {
    "swedish": {
        "rules": [("th", "t"), ("ch", "k"), ("sh", "sj"), ("w", "v"), ("oo", "å"), ("ee", "i"), ("ck", "k")],
        "endings": ["en", "et", "ar", "or", "er"],
    },
    "norwegian": {
        "rules": [("th", "t"), ("ch", "k"), ("sh", "sj"), ("w", "v"), ("oo", "ø"), ("ee", "i")],
        "endings": ["en", "et", "ene", "er"],
    },
    "danish": {
        "rules": [("th", "t"), ("ch", "k"), ("sh", "sj"), ("w", "v"), ("oo", "å"), ("ee", "i")],
        "endings": ["en", "et", "ene", "er", "erne"],
    },
    "german": {
        "rules": [("th", "t"), ("sh", "sch"), ("w", "v"), ("oo", "u"), ("ee", "ie")],
        "endings": ["en", "er", "es", "e", "ung"],
    },
    "dutch": {
        "rules": [("th", "t"), ("sh", "sch"), ("oo", "oe"), ("ee", "ie")],
        "endings": ["en", "je", "tje", "pje", "heid"],
    },
    "french": {
        "rules": [("th", "t"), ("oo", "ou"), ("ee", "é"), ("k", "que")],
        "endings": ["e", "es", "ent", "ement", "tion"],
    },
    "spanish": {
        "rules": [("th", "t"), ("sh", "ch"), ("oo", "u"), ("ee", "í")],
        "endings": ["o", "a", "os", "as", "ción"],
    },
    "italian": {
        "rules": [("th", "t"), ("oo", "u"), ("ee", "i"), ("k", "c")],
        "endings": ["o", "a", "i", "e", "zione"],
    },
}

DEFAULT_LANGUAGE = "swedish"


def supported_languages() -> List[str]:
    return sorted(LANGUAGE_PATTERNS)


def normalize_language(language: Optional[str]) -> str:
    return (language or "").strip().lower()


def is_supported(language: Optional[str]) -> bool:
    return normalize_language(language) in LANGUAGE_PATTERNS


def build_policy(
        language: str,
        word_inclusion_probability: float = 0.5,
        ending_probability: float = 0.3,
        min_word_length: int = 3,
) -> TransformationPolicy:
    """
    Builds the pattern-substitution policy for a language.

    Raises:
        KeyError: If the language has no pattern table.
    """
    table = LANGUAGE_PATTERNS[normalize_language(language)]
    rules: List[Tuple[str, str]] = [tuple(rule) for rule in table["rules"]]
    return TransformationPolicy(
        substitution_rules=rules,
        ending_suffixes=list(table["endings"]),
        ending_probability=ending_probability,
        word_inclusion_probability=word_inclusion_probability,
        min_word_length=min_word_length,
    )
