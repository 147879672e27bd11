"""Ingestion coordinator — runs each source adapter and stores new articles."""

import logging
from dataclasses import asdict, dataclass

import httpx

from newsfeed.config import Settings, get_settings
from newsfeed.services.article_store import ArticleStore, DuplicateArticleError
from newsfeed.services.ingestion.adapters import build_adapter
from newsfeed.services.ingestion.base import SourceAdapter
from newsfeed.services.ingestion.normalize import normalize
from newsfeed.services.ingestion.sources import SourceConfig, load_sources

logger = logging.getLogger(__name__)


@dataclass
class SourceOutcome:
    """Per-source counters from an ingestion run."""

    source_name: str
    new_count: int = 0
    duplicate_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


async def ingest_source(store: ArticleStore, adapter: SourceAdapter) -> SourceOutcome:
    """Fetch one source and store every candidate not already present.

    Never raises: an adapter failure is recorded as a single error on the
    outcome, and each candidate failure only bumps ``error_count``.
    """
    source = adapter.source
    outcome = SourceOutcome(source_name=source.name.value)

    try:
        batch = await adapter.fetch_candidates()
    except Exception as e:
        outcome.error_count += 1
        outcome.error = str(e)
        logger.error("Source %s failed: %s", source.name.value, e)
        return outcome

    outcome.skipped_count = batch.skipped
    outcome.error_count += batch.failed

    for raw in batch.items:
        title = (raw["title"] or "")[:60]
        try:
            candidate = normalize(raw, source)

            existing = await store.find_existing(
                candidate.source_url, candidate.external_id
            )
            if existing is not None:
                outcome.duplicate_count += 1
                logger.debug("Already stored: %s", title)
                continue

            await store.insert(candidate)
            outcome.new_count += 1
            logger.info("Stored: %s", title)

        except DuplicateArticleError:
            # Lost a race with a concurrent insert of the same article
            outcome.duplicate_count += 1
            logger.debug("Concurrent duplicate: %s", title)
        except Exception as e:
            outcome.error_count += 1
            logger.error("Failed to store '%s': %s", title, e)

    logger.info(
        "%s: %d new, %d duplicate, %d skipped, %d errors",
        outcome.source_name,
        outcome.new_count,
        outcome.duplicate_count,
        outcome.skipped_count,
        outcome.error_count,
    )
    return outcome


async def run_ingestion(
    store: ArticleStore,
    sources: list[SourceConfig] | None = None,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[SourceOutcome]:
    """Run every enabled source once, in configured order.

    Args:
        store: Open article store.
        sources: Optional source list. If not provided, loads from config.
        settings: Optional settings override.
        client: Optional HTTP client for the adapters (shared client by default).

    Returns:
        One outcome per enabled source.
    """
    settings = settings or get_settings()
    if sources is None:
        sources = load_sources(settings.sources_file, settings.max_items_per_source)

    enabled = [s for s in sources if s.enabled]
    logger.info("Starting ingestion run over %d sources", len(enabled))

    outcomes: list[SourceOutcome] = []
    for source in enabled:
        adapter = build_adapter(source, settings=settings, client=client)
        outcomes.append(await ingest_source(store, adapter))

    logger.info(
        "Ingestion complete: %d new, %d duplicate, %d errors",
        sum(o.new_count for o in outcomes),
        sum(o.duplicate_count for o in outcomes),
        sum(o.error_count for o in outcomes),
    )
    return outcomes
