"""Adapter selection by source kind."""

import httpx

from newsfeed.config import Settings, get_settings
from newsfeed.services.ingestion.base import SourceAdapter
from newsfeed.services.ingestion.hackernews import HackerNewsAdapter
from newsfeed.services.ingestion.rss import FeedAdapter
from newsfeed.services.ingestion.sources import AdapterKind, SourceConfig


def build_adapter(
    source: SourceConfig,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> SourceAdapter:
    """Create the adapter for ``source.kind``.

    Every AdapterKind must have a branch here; an unhandled kind raises
    rather than silently ingesting nothing.
    """
    settings = settings or get_settings()

    if source.kind is AdapterKind.FEED:
        return FeedAdapter(
            source,
            client=client,
            timeout=settings.feed_timeout_seconds,
        )
    if source.kind is AdapterKind.TREE_API:
        return HackerNewsAdapter(
            source,
            client=client,
            index_timeout=settings.feed_timeout_seconds,
            item_timeout=settings.item_timeout_seconds,
            item_delay=settings.item_fetch_delay_seconds,
        )
    raise ValueError(f"No adapter for source kind {source.kind!r}")
