# src/overlay/model.py (Overlay Layer)
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from bs4 import NavigableString
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SelectionMethod(str, Enum):
    COUNT_UNIFORM = "count_uniform"
    LENGTH_WEIGHTED = "length_weighted"


class TieBreak(str, Enum):
    FIRST = "first"
    LAST = "last"


class TextSegment(BaseModel):
    """A trimmed text node of the document, referenced in place."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    node: NavigableString
    text: str
    index: int

    @property
    def length(self) -> int:
        return len(self.text)


class SelectionPolicy(BaseModel):
    percentage: float = 30
    scope: Union[str, List[str]] = "paragraphs"
    method: SelectionMethod = SelectionMethod.COUNT_UNIFORM

    @field_validator("percentage", mode="before")
    @classmethod
    def _clamp_percentage(cls, v: Any) -> float:
        if v is None:
            return 0.0
        return min(100.0, max(0.0, float(v)))


class SelectionResult(BaseModel):
    segments: List[TextSegment] = Field(default_factory=list)
    total_candidates: int = 0
    total_length: int = 0
    selected_length: int = 0
    requested_percentage: float = 0.0
    achieved_percentage: float = 0.0

    @property
    def selected_count(self) -> int:
        return len(self.segments)


class TranslationPair(BaseModel):
    original: str
    translated: str


class Fragment(BaseModel):
    """
    A piece of rewritten text. Substituted words carry the word they replaced;
    untouched text has no original.
    """
    text: str
    original: Optional[str] = None

    @property
    def is_substitution(self) -> bool:
        return self.original is not None


class TransformationResult(BaseModel):
    original: str
    fragments: List[Fragment] = Field(default_factory=list)
    pairs: List[TranslationPair] = Field(default_factory=list)

    @property
    def translated(self) -> str:
        return "".join(f.text for f in self.fragments)


class TransformationPolicy(BaseModel):
    """How one language rewrites words in the pattern-substitution strategy."""
    substitution_rules: List[Tuple[str, str]] = Field(default_factory=list)
    ending_suffixes: List[str] = Field(default_factory=list)
    ending_probability: float = Field(default=0.3, ge=0, le=1)
    word_inclusion_probability: float = Field(default=0.5, ge=0, le=1)
    min_word_length: int = Field(default=3, ge=1)
