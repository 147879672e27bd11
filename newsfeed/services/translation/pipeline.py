"""Translation pipeline — works through the untranslated backlog one article at a time."""

import asyncio
import logging

from newsfeed.config import Settings, get_settings
from newsfeed.models.article import Article
from newsfeed.services.article_store import (
    FAILED_PREFIX,
    NO_TRANSLATION_PREFIX,
    ArticleStore,
)
from newsfeed.services.translation.deepl import DeepLClient, TranslationError
from newsfeed.services.translation.enrichment import Enricher, build_enricher

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5

# Delay after each external call; the only rate-limit defense
CALL_DELAY = 1.0

# Summaries shorter than this after translation get an expansion pass
ENRICHMENT_MIN_LENGTH = 120


class TranslationPipeline:
    """Translate titles and summaries of untranslated articles.

    Calls are strictly sequential with a fixed pause after each external
    request. Any single failure degrades to a sentinel string; nothing is
    retried within a run.
    """

    def __init__(
        self,
        store: ArticleStore,
        client: DeepLClient,
        enricher: Enricher | None = None,
        call_delay: float = CALL_DELAY,
        enrichment_min_length: int = ENRICHMENT_MIN_LENGTH,
    ) -> None:
        self.store = store
        self.client = client
        self.enricher = enricher
        self.call_delay = call_delay
        self.enrichment_min_length = enrichment_min_length

    @classmethod
    def from_settings(
        cls, store: ArticleStore, settings: Settings | None = None
    ) -> "TranslationPipeline":
        settings = settings or get_settings()
        client = DeepLClient.from_settings(settings)
        return cls(
            store,
            client,
            enricher=build_enricher(settings, client),
            call_delay=settings.translation_delay_seconds,
            enrichment_min_length=settings.enrichment_min_length,
        )

    async def translate_text(self, text: str) -> str:
        """Translate ``text``, returning a sentinel-prefixed original on failure."""
        if not self.client.configured:
            return NO_TRANSLATION_PREFIX + text

        try:
            return await self.client.translate(text)
        except TranslationError as e:
            logger.warning("Translation failed: %s", e)
            return FAILED_PREFIX + text
        finally:
            await asyncio.sleep(self.call_delay)

    async def _enrich(self, translated: str) -> str:
        """Expand a short translation; keep the input if expansion fails."""
        if self.enricher is None or len(translated) >= self.enrichment_min_length:
            return translated

        try:
            return await self.enricher.expand(translated)
        except Exception as e:
            logger.warning("Summary expansion failed, keeping direct translation: %s", e)
            return translated
        finally:
            await asyncio.sleep(self.call_delay)

    async def translate_summary(self, summary: str) -> str:
        translated = await self.translate_text(summary)
        if translated.startswith((FAILED_PREFIX, NO_TRANSLATION_PREFIX)):
            return translated
        return await self._enrich(translated)

    async def translate_article(self, article: Article) -> None:
        """Translate one article and persist the result."""
        title_translated = await self.translate_text(article.title)

        summary_translated = None
        if article.summary:
            summary_translated = await self.translate_summary(article.summary)

        await self.store.mark_translated(
            article.id, title_translated, summary_translated
        )

    async def translate_backlog(self, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
        """Translate up to ``batch_size`` untranslated articles, newest first.

        Returns:
            Number of articles attempted (not necessarily succeeded).
        """
        backlog = await self.store.find_many(
            filters={"is_translated": False},
            order_by="published_at",
            descending=True,
            limit=batch_size,
        )

        if not backlog:
            logger.info("No untranslated articles")
            return 0

        if not self.client.configured:
            logger.warning("DeepL API key not set; storing untranslated placeholders")

        logger.info("Translating %d articles", len(backlog))

        for article in backlog:
            try:
                await self.translate_article(article)
                logger.info("Translated: %s", article.title[:60])
            except Exception as e:
                logger.error("Failed to translate '%s': %s", article.title[:60], e)

        return len(backlog)

    async def reset_failed(self) -> int:
        """Return sentinel-translated articles to the backlog.

        Returns:
            Number of articles reset.
        """
        failed = await self.store.find_sentinel_translations()
        if not failed:
            return 0

        count = await self.store.reset_translation(a.id for a in failed)
        logger.info("Reset %d articles with placeholder translations", count)
        return count
