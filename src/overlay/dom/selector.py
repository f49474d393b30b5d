# src/overlay/dom/selector.py
import abc
import logging
import math
import random
from typing import Dict, List, Optional, Type

from overlay.dom.document import WebPageDocument
from overlay.model import SelectionMethod, SelectionPolicy, SelectionResult, TextSegment

logger = logging.getLogger(__name__)

# Named scopes. 'paragraphs' skips headlines and navigation; 'broad' covers
# most inline and block tags that carry running text.
SCOPE_PRESETS: Dict[str, List[str]] = {
    "paragraphs": ["p", "article p", ".article-body p", ".content p", ".story-body p"],
    "broad": [
        "p", "li", "dd", "dt", "td", "th", "blockquote", "figcaption", "caption",
        "h1", "h2", "h3", "h4", "h5", "h6",
        "span", "a", "em", "strong", "b", "i", "small", "label",
    ],
}


def resolve_scope(scope) -> List[str]:
    """Turns a preset name or an explicit selector list into selectors."""
    if isinstance(scope, str):
        if scope in SCOPE_PRESETS:
            return list(SCOPE_PRESETS[scope])
        return [s.strip() for s in scope.split(",") if s.strip()]
    return [s for s in scope if s]


class NodeSelector(metaclass=abc.ABCMeta):
    """
    Picks the text segments of a document that will be transformed.
    Subclasses implement one sampling method; candidates are always the
    trimmed, non-empty text nodes inside the policy's scope.
    """
    method: SelectionMethod

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def candidates(self, document: WebPageDocument, policy: SelectionPolicy) -> List[TextSegment]:
        elements = document.query(resolve_scope(policy.scope))
        nodes = document.text_nodes(elements)
        return [TextSegment(node=node, text=node.strip(), index=i) for i, node in enumerate(nodes)]

    def select(self, document: WebPageDocument, policy: SelectionPolicy) -> SelectionResult:
        segments = self.candidates(document, policy)
        total_length = sum(s.length for s in segments)

        if not segments or policy.percentage <= 0:
            chosen: List[TextSegment] = []
        else:
            chosen = self._choose(segments, total_length, policy.percentage)

        selected_length = sum(s.length for s in chosen)
        result = SelectionResult(
            segments=chosen,
            total_candidates=len(segments),
            total_length=total_length,
            selected_length=selected_length,
            requested_percentage=policy.percentage,
            achieved_percentage=self._achieved(len(chosen), len(segments), selected_length, total_length),
        )
        logger.info(
            "Selected %d of %d text nodes (%s, requested %.1f%%, achieved %.1f%%)",
            result.selected_count, result.total_candidates, self.method.value,
            result.requested_percentage, result.achieved_percentage
        )
        return result

    @abc.abstractmethod
    def _choose(self, segments: List[TextSegment], total_length: int, percentage: float) -> List[TextSegment]:
        raise NotImplementedError

    @abc.abstractmethod
    def _achieved(self, count: int, total_count: int, length: int, total_length: int) -> float:
        raise NotImplementedError


class CountUniformSelector(NodeSelector):
    """Draws floor(n * pct / 100) distinct segments uniformly at random."""
    method = SelectionMethod.COUNT_UNIFORM

    def _choose(self, segments, total_length, percentage):
        target_count = math.floor(len(segments) * percentage / 100)
        indices = self.rng.sample(range(len(segments)), target_count)
        return [segments[i] for i in sorted(indices)]

    def _achieved(self, count, total_count, length, total_length):
        return round(count / total_count * 100, 2) if total_count else 0.0


class LengthWeightedSelector(NodeSelector):
    """
    Walks segments in document order until the selected character count
    reaches floor(total_length * pct / 100). Overshoot is bounded by the
    length of the last segment taken.
    """
    method = SelectionMethod.LENGTH_WEIGHTED

    def _choose(self, segments, total_length, percentage):
        target_length = math.floor(total_length * percentage / 100)
        chosen: List[TextSegment] = []
        accumulated = 0
        for segment in segments:
            if accumulated >= target_length:
                break
            chosen.append(segment)
            accumulated += segment.length
        return chosen

    def _achieved(self, count, total_count, length, total_length):
        return round(length / total_length * 100, 2) if total_length else 0.0


SELECTORS: Dict[SelectionMethod, Type[NodeSelector]] = {
    SelectionMethod.COUNT_UNIFORM: CountUniformSelector,
    SelectionMethod.LENGTH_WEIGHTED: LengthWeightedSelector,
}


def create_selector(method: SelectionMethod, rng: Optional[random.Random] = None) -> NodeSelector:
    return SELECTORS[SelectionMethod(method)](rng)
