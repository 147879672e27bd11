"""RSS/Atom feed adapter for syndication-document sources."""

import logging
import re
from datetime import datetime, timezone

import feedparser
import httpx

from newsfeed.services.ingestion.base import (
    FetchBatch,
    FetchError,
    RawItem,
    SourceAdapter,
)
from newsfeed.services.ingestion.sources import SourceConfig

logger = logging.getLogger(__name__)

# Default timeout for feed requests
REQUEST_TIMEOUT = 10.0

# Maximum length for article summaries before truncation
MAX_SUMMARY_LENGTH = 500


def _strip_html(text: str) -> str:
    """Basic HTML stripping — feedparser often returns HTML."""
    text = re.sub(r"<[^>]+>", " ", text)
    return " ".join(text.split())


def _parse_published_date(entry: feedparser.FeedParserDict) -> datetime | None:
    """Parse the published date from a feed entry.

    Handles both RSS 2.0 (published_parsed) and Atom (updated_parsed) formats.
    Returns None when no usable date is present.
    """
    time_struct = entry.get("published_parsed") or entry.get("updated_parsed")

    if time_struct:
        try:
            return datetime(*time_struct[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to parse date from entry: %s", e)

    return None


def _extract_summary(entry: feedparser.FeedParserDict) -> str:
    """Extract a plain-text summary from a feed entry.

    Tries summary first, then description. Truncated to MAX_SUMMARY_LENGTH.
    """
    summary = entry.get("summary") or entry.get("description") or ""
    summary = _strip_html(summary)

    if len(summary) > MAX_SUMMARY_LENGTH:
        summary = summary[: MAX_SUMMARY_LENGTH - 3] + "..."

    return summary


def _extract_body(entry: feedparser.FeedParserDict) -> str:
    """Extract full content (content:encoded / Atom content) as plain text."""
    content = entry.get("content") or []
    if content:
        return _strip_html(content[0].get("value", ""))
    return ""


def _extract_categories(entry: feedparser.FeedParserDict) -> list[str]:
    """Collect category terms, keeping feed order and dropping repeats."""
    categories: list[str] = []
    for tag in entry.get("tags") or []:
        term = (tag.get("term") or "").strip()
        if term and term not in categories:
            categories.append(term)
    return categories


def parse_feed_entries(feed_data: str, source: SourceConfig) -> FetchBatch:
    """Parse RSS/Atom feed data into raw items.

    Only the first ``source.max_items`` entries are considered. Entries
    without a link are skipped.

    Args:
        feed_data: Raw feed XML/data as string.
        source: Source configuration.

    Returns:
        Batch of raw items, with the skipped-entry count.

    Raises:
        FetchError: If the document is not a recognizable feed and yields no entries.
    """
    parsed = feedparser.parse(feed_data)

    if not parsed.entries and (parsed.bozo or not parsed.version):
        raise FetchError(
            f"Unparseable feed document for {source.name.value}: "
            f"{parsed.get('bozo_exception') or 'unrecognized format'}"
        )

    if parsed.bozo and parsed.bozo_exception:
        logger.warning(
            "Feed parsing warning for %s: %s",
            source.name.value,
            parsed.bozo_exception,
        )

    batch = FetchBatch()

    for entry in parsed.entries[: source.max_items]:
        link = (entry.get("link") or "").strip()
        if not link:
            logger.debug("Skipping entry without link: %s", entry.get("title"))
            batch.skipped += 1
            continue

        item: RawItem = {
            "title": (entry.get("title") or "").strip() or None,
            "link": link,
            "summary": _extract_summary(entry),
            "body": _extract_body(entry),
            "published_at": _parse_published_date(entry),
            "author": entry.get("author"),
            "categories": _extract_categories(entry) or list(source.categories),
            # Feed GUIDs are not used for identity; source_url is the key
            "external_id": None,
            "popularity": 0,
        }
        batch.items.append(item)

    return batch


class FeedAdapter(SourceAdapter):
    """Adapter for RSS/Atom sources: one fetch, then parse."""

    def __init__(
        self,
        source: SourceConfig,
        client: httpx.AsyncClient | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        super().__init__(source, client)
        self.timeout = timeout

    async def fetch_feed(self) -> str:
        """Fetch the feed document.

        Raises:
            FetchError: On network, timeout or HTTP errors.
        """
        try:
            response = await self.client.get(
                self.source.url,
                timeout=self.timeout,
                follow_redirects=True,
                headers={
                    "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch feed {self.source.url}: {e}") from e
        return response.text

    async def fetch_candidates(self) -> FetchBatch:
        feed_data = await self.fetch_feed()
        batch = parse_feed_entries(feed_data, self.source)
        logger.info(
            "Fetched %d entries from %s (%d skipped)",
            len(batch.items),
            self.source.name.value,
            batch.skipped,
        )
        return batch
