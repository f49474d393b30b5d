# src/overlay/dom/vocabulary.py
import logging
from typing import Dict, Iterable, List

from overlay.dom.document import WebPageDocument
from overlay.model import TieBreak, TranslationPair

logger = logging.getLogger(__name__)

VOCABULARY_ID = "pageglot-vocabulary"


class VocabularyAggregator:
    """
    Collects the substitutions of one pass, keyed by lowercase original word.

    When one word was rewritten differently in two segments, the tie-break
    decides which form is kept: FIRST keeps the earliest, LAST the latest.
    Entries stay in order of first appearance either way.
    """

    def __init__(self, tie_break: TieBreak = TieBreak.FIRST, title: str = "Vocabulary"):
        self.tie_break = TieBreak(tie_break)
        self.title = title
        self._entries: Dict[str, TranslationPair] = {}
        self.conflicts = 0

    def add(self, pairs: Iterable[TranslationPair]) -> None:
        for pair in pairs:
            key = pair.original.lower()
            existing = self._entries.get(key)
            if existing is None:
                self._entries[key] = pair
                continue
            if existing.translated != pair.translated:
                self.conflicts += 1
                if self.tie_break is TieBreak.LAST:
                    self._entries[key] = pair

    def pairs(self) -> List[TranslationPair]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def render(self, document: WebPageDocument) -> bool:
        """
        Appends the summary block to the body. Returns False when there is
        nothing to list, in which case the document is left untouched.
        """
        if not self._entries:
            return False

        aside = document.new_tag("aside", {"id": VOCABULARY_ID, "class": "pageglot-vocabulary"})
        aside.append(document.new_tag("h2", string=self.title))
        listing = document.new_tag("dl")
        for pair in self._entries.values():
            listing.append(document.new_tag("dt", {"data-original": pair.original}, pair.translated))
            listing.append(document.new_tag("dd", string=pair.original))
        aside.append(listing)
        document.append_to_body(aside)

        if self.conflicts:
            logger.debug("Vocabulary resolved %d conflicting forms (%s wins)", self.conflicts, self.tie_break.value)
        return True
