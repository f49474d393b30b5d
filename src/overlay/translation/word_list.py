# src/overlay/translation/word_list.py
import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from pageglot.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class DictionaryStore:
    """
    Process-wide cache of per-language word lists.

    Each list is read from '<language>.json' (a flat object of lowercase
    source word -> target word) on first use, or eagerly via `preload`.
    Loading happens once per language under a lock; the returned mappings
    are read-only views shared by all requests.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or PathUtils.get_dictionaries_dir()
        self._dictionaries: Dict[str, Mapping[str, str]] = {}
        self._lock = threading.Lock()
        self.load_count = 0

    def available_languages(self) -> List[str]:
        if not self.base_dir.exists():
            return []
        return sorted(p.stem for p in self.base_dir.glob("*.json"))

    def get(self, language: str) -> Mapping[str, str]:
        """
        Returns the word list for a language, loading it on first use.

        Raises:
            KeyError: If no word list exists for the language.
        """
        cached = self._dictionaries.get(language)
        if cached is not None:
            return cached

        with self._lock:
            # Another thread may have finished the load while we waited
            cached = self._dictionaries.get(language)
            if cached is None:
                cached = self._load(language)
                self._dictionaries[language] = cached
        return cached

    def preload(self, languages: Optional[Iterable[str]] = None) -> None:
        for language in (languages or self.available_languages()):
            self.get(language)

    def _load(self, language: str) -> Mapping[str, str]:
        path = self.base_dir / f"{language}.json"
        if not path.exists():
            raise KeyError(f"No dictionary available for language '{language}'")

        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        entries = {str(k).strip().lower(): str(v).strip() for k, v in raw.items() if str(k).strip()}
        self.load_count += 1
        logger.info("Loaded %d dictionary entries for '%s' from %s", len(entries), language, path)
        return MappingProxyType(entries)


# The shared store used by the application.
dictionary_store = DictionaryStore()
