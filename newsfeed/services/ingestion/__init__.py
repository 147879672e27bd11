"""Ingestion services for fetching, normalizing, and storing articles."""

from newsfeed.services.ingestion.adapters import build_adapter
from newsfeed.services.ingestion.base import (
    FetchBatch,
    FetchError,
    RawItem,
    SourceAdapter,
)
from newsfeed.services.ingestion.hackernews import HackerNewsAdapter
from newsfeed.services.ingestion.normalize import estimate_read_minutes, normalize
from newsfeed.services.ingestion.orchestrator import (
    SourceOutcome,
    ingest_source,
    run_ingestion,
)
from newsfeed.services.ingestion.rss import FeedAdapter, parse_feed_entries
from newsfeed.services.ingestion.sources import (
    AdapterKind,
    SourceConfig,
    SourceConfigError,
    load_sources,
)

__all__ = [
    "AdapterKind",
    "FeedAdapter",
    "FetchBatch",
    "FetchError",
    "HackerNewsAdapter",
    "RawItem",
    "SourceAdapter",
    "SourceConfig",
    "SourceConfigError",
    "SourceOutcome",
    "build_adapter",
    "estimate_read_minutes",
    "ingest_source",
    "load_sources",
    "normalize",
    "parse_feed_entries",
    "run_ingestion",
]
