"""Run orchestrator — one invocation of ingestion and/or translation."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from newsfeed.config import Settings, get_settings
from newsfeed.services.article_store import ArticleStore, open_store
from newsfeed.services.http_client import close_shared_client
from newsfeed.services.ingestion.orchestrator import SourceOutcome, run_ingestion
from newsfeed.services.translation.pipeline import TranslationPipeline

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    FETCH = "fetch"
    TRANSLATE = "translate"
    BOTH = "both"
    RESET = "reset"


@dataclass
class RunReport:
    """Aggregate results of one run."""

    mode: RunMode
    sources: list[SourceOutcome] = field(default_factory=list)
    translation_attempted: int = 0
    reset: int = 0
    total_articles: int = 0
    translated_articles: int = 0
    translated_by_source: dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def untranslated_articles(self) -> int:
        return self.total_articles - self.translated_articles

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "sources": [s.to_dict() for s in self.sources],
            "translation_attempted": self.translation_attempted,
            "reset": self.reset,
            "total_articles": self.total_articles,
            "translated_articles": self.translated_articles,
            "untranslated_articles": self.untranslated_articles,
            "translated_by_source": self.translated_by_source,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }


async def collect_totals(store: ArticleStore, report: RunReport) -> None:
    report.total_articles = await store.count()
    report.translated_articles = await store.count({"is_translated": True})
    report.translated_by_source = await store.count_by(
        "source_name", {"is_translated": True}
    )


async def execute(
    store: ArticleStore,
    mode: RunMode,
    settings: Settings,
    batch_size: int | None = None,
) -> RunReport:
    """Run the stages for ``mode`` against an already-open store."""
    report = RunReport(mode=mode)

    if mode in (RunMode.FETCH, RunMode.BOTH):
        report.sources = await run_ingestion(store, settings=settings)

    if mode in (RunMode.TRANSLATE, RunMode.BOTH, RunMode.RESET):
        pipeline = TranslationPipeline.from_settings(store, settings)
        if mode is RunMode.RESET:
            report.reset = await pipeline.reset_failed()
        else:
            report.translation_attempted = await pipeline.translate_backlog(
                batch_size or settings.translation_batch_size
            )

    await collect_totals(store, report)
    return report


async def run(
    mode: RunMode | str = RunMode.FETCH,
    settings: Settings | None = None,
    batch_size: int | None = None,
) -> RunReport:
    """Open the store, run ``mode``, and always release the store.

    Raises:
        ValueError: If ``mode`` is not a known run mode.
        StoreUnavailableError: If the store cannot be opened.
        Exception: Any failure escaping the stages, after logging it.
    """
    mode = RunMode(mode)
    settings = settings or get_settings()
    started = time.monotonic()
    logger.info("Run started (mode=%s)", mode.value)

    try:
        async with open_store(settings.database_url) as store:
            report = await execute(store, mode, settings, batch_size)
    except Exception:
        logger.exception("Run failed (mode=%s)", mode.value)
        raise
    finally:
        await close_shared_client()

    report.elapsed_seconds = time.monotonic() - started
    logger.info(
        "Run finished in %.1fs: %d articles, %d translated",
        report.elapsed_seconds,
        report.total_articles,
        report.translated_articles,
    )
    return report
