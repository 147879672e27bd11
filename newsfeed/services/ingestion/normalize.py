"""Normalization of raw source items into article candidates."""

import math
from datetime import datetime, timezone

from newsfeed.models.article import ArticleCandidate
from newsfeed.services.ingestion.base import RawItem
from newsfeed.services.ingestion.sources import SourceConfig

WORDS_PER_MINUTE = 200

DEFAULT_TITLE = "No Title"
DEFAULT_AUTHOR = "Unknown"


def estimate_read_minutes(text: str | None) -> int:
    """Minutes to read ``text`` at WORDS_PER_MINUTE, never less than 1."""
    if not text:
        return 1
    word_count = len(text.split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def normalize(raw: RawItem, source: SourceConfig) -> ArticleCandidate:
    """Map a raw item onto the stored article schema.

    The caller guarantees ``raw["link"]`` is set; adapters drop link-less items.
    """
    title = (raw["title"] or "").strip() or DEFAULT_TITLE
    summary = raw["summary"] or ""
    body = raw["body"] or ""

    return ArticleCandidate(
        title=title,
        summary=summary,
        body=body,
        source_url=raw["link"],
        published_at=raw["published_at"] or datetime.now(timezone.utc),
        author=(raw["author"] or "").strip() or DEFAULT_AUTHOR,
        categories=raw["categories"],
        external_id=raw["external_id"],
        source_name=source.name,
        popularity_score=raw["popularity"],
        estimated_read_minutes=estimate_read_minutes(body or summary or title),
    )
