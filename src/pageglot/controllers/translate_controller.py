# src/pageglot/controllers/translate_controller.py
import asyncio
import json
import logging
import random
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from overlay.dom.annotator import MarkupAnnotator
from overlay.dom.document import WebPageDocument
from overlay.dom.link_rewriter import LinkRewriter
from overlay.dom.selector import create_selector
from overlay.dom.vocabulary import VocabularyAggregator
from overlay.model import SelectionPolicy, TieBreak
from overlay.translation.factory import create_strategy
from overlay.translation.strategies import TransformationStrategy
from overlay.translation.word_list import DictionaryStore
from pageglot.core.errors import InternalError, PipelineError, ValidationError
from pageglot.core.managers.config_manager import ConfigManager, config_manager
from pageglot.core.managers.storage_manager import StorageBase
from pageglot.model import PipelineOutcome, TranslateRequest, TranslationRecord
from retriever.services.page_fetch_service import PageFetchService

logger = logging.getLogger(__name__)


def parse_translate_request(payload: Any) -> TranslateRequest:
    """
    Validates a raw request body.

    Raises:
        ValidationError: With pydantic's error list as details.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", [{"msg": "Expected a JSON object"}])
    try:
        return TranslateRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError("Invalid translate request", json.loads(e.json(include_url=False))) from e


class TranslateController:
    """
    Orchestrates one translation request:
    fetch -> parse -> inject style/script -> rewrite links -> select ->
    transform + persist -> vocabulary -> serialize.

    Any failure other than a single unresolvable link aborts the request;
    no partial document is ever returned.
    """

    def __init__(
            self,
            fetcher: PageFetchService,
            storage: StorageBase,
            config: Optional[ConfigManager] = None,
            rng_factory: Optional[Callable[[], random.Random]] = None,
            store: Optional[DictionaryStore] = None,
    ):
        self.fetcher = fetcher
        self.storage = storage
        self.config = config or config_manager
        self.rng_factory = rng_factory
        self.store = store

    # --- POLICY HELPERS ---

    def new_rng(self) -> random.Random:
        """One random source per request; seeded when 'translation.seed' is set."""
        if self.rng_factory is not None:
            return self.rng_factory()
        seed = self.config.get_nested("translation.seed")
        return random.Random(seed) if seed is not None else random.Random()

    def selection_policy(self, percentage: float) -> SelectionPolicy:
        return SelectionPolicy(
            percentage=percentage,
            scope=self.config.get_nested("selection.scope", "paragraphs"),
            method=self.config.get_nested("selection.method", "count_uniform"),
        )

    def build_strategy(self, language: str) -> TransformationStrategy:
        name = self.config.get_nested("translation.strategy", "pattern")
        try:
            return create_strategy(
                name,
                language,
                word_inclusion_probability=float(self.config.get_nested("translation.word_inclusion_probability", 0.5)),
                ending_probability=float(self.config.get_nested("translation.ending_probability", 0.3)),
                min_word_length=int(self.config.get_nested("translation.min_word_length", 3)),
                store=self.store,
            )
        except (KeyError, ValueError) as e:
            raise InternalError(f"Cannot build '{name}' strategy for '{language}': {e}") from e

    # --- PIPELINE ---

    async def run(self, request: TranslateRequest, cookie: Optional[str] = None) -> PipelineOutcome:
        """
        Runs the full pipeline for a validated request.

        Raises:
            PipelineError: Any typed failure (network, upstream, internal).
        """
        logger.info(
            "Fetching URL: %s with translation percentage: %s%% (%s)",
            request.url, request.translation_percentage, request.language
        )
        rng = self.new_rng()
        strategy = self.build_strategy(request.language)

        # 1. Fetch (raises NetworkError / AccessDenied / UpstreamError)
        fetched = await self.fetcher.fetch_page(request.url, cookie=cookie)

        try:
            # 2. Parse and inject the static assets
            document = WebPageDocument.parse(fetched.html, fetched.final_url or request.url)
            annotator = MarkupAnnotator(document)
            annotator.inject_style()
            link_rewriter = LinkRewriter(document)
            link_rewriter.inject_script()
            link_rewriter.rewrite_links()

            # 3. Select
            policy = self.selection_policy(request.translation_percentage)
            selection = create_selector(policy.method, rng).select(document, policy)

            # 4. Transform + persist in document order
            vocabulary = VocabularyAggregator(
                tie_break=TieBreak(self.config.get_nested("vocabulary.tie_break", "first")),
                title=self.config.get_nested("vocabulary.title", "Vocabulary"),
            )
            concurrent = bool(self.config.get_nested("translation.concurrent_persistence", False))
            pending: List[TranslationRecord] = []

            for segment in selection.segments:
                result = strategy.transform(segment.text, rng)
                annotator.annotate(segment, result)
                vocabulary.add(result.pairs)

                record = TranslationRecord(
                    original_text=segment.text, translated_text=result.translated, url=request.url
                )
                if concurrent:
                    pending.append(record)
                else:
                    await self.storage.save_translation(record)

            if pending:
                await asyncio.gather(*(self.storage.save_translation(r) for r in pending))

            # 5. Vocabulary + serialize
            vocabulary.render(document)
            html = document.serialize()

        except PipelineError:
            raise
        except Exception as e:
            logger.error("Translation pipeline failed for %s: %s", request.url, e, exc_info=True)
            raise InternalError(f"Failed to process {request.url}: {e}") from e

        stats: Dict[str, Any] = {
            "candidates": selection.total_candidates,
            "translated": selection.selected_count,
            "requested_percentage": selection.requested_percentage,
            "achieved_percentage": selection.achieved_percentage,
            "links_rewritten": link_rewriter.rewritten,
            "vocabulary": len(vocabulary),
            "strategy": strategy.name,
        }
        logger.info("Successfully translated %d text nodes for %s", selection.selected_count, request.url)
        return PipelineOutcome(html=html, set_cookies=fetched.set_cookies, stats=stats)

    async def translate(self, payload: Any, cookie: Optional[str] = None) -> PipelineOutcome:
        """Validates a raw payload before any network access, then runs the pipeline."""
        request = parse_translate_request(payload)
        return await self.run(request, cookie=cookie)
