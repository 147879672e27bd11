"""Hacker News adapter — a two-round tree fetch (story index, then each item)."""

import asyncio
import html
import logging
import re
from datetime import datetime, timezone
from typing import Any

import httpx

from newsfeed.services.ingestion.base import (
    FetchBatch,
    FetchError,
    RawItem,
    SourceAdapter,
)
from newsfeed.services.ingestion.sources import SourceConfig

logger = logging.getLogger(__name__)

INDEX_TIMEOUT = 10.0
ITEM_TIMEOUT = 5.0

# Pause between per-item requests to stay under upstream rate limits
ITEM_FETCH_DELAY = 0.1

DEFAULT_CATEGORIES = ["Technology", "Programming"]


def _parse_time(value: Any) -> datetime | None:
    """Convert an epoch-seconds field to an aware datetime."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning("Unparseable item time: %r", value)
        return None


def _html_to_text(text: str) -> str:
    text = re.sub(r"<(p|br)[^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    return " ".join(html.unescape(text).split())


def item_to_raw(item: dict[str, Any] | None, source: SourceConfig) -> RawItem | None:
    """Map an item payload to a raw item, or None if it should not be stored.

    Skipped: absent items, non-story types, and stories without an external URL
    (Ask HN / Show HN text posts).

    Raises:
        ValueError: If the payload is not a JSON object.
    """
    if item is None:
        return None
    if not isinstance(item, dict):
        raise ValueError(f"Unexpected item payload: {type(item).__name__}")
    if item.get("type") != "story":
        return None
    url = item.get("url")
    if not isinstance(url, str) or not url.strip():
        return None

    text = item.get("text")
    text = _html_to_text(text) if isinstance(text, str) else ""
    title = item.get("title")
    author = item.get("by")
    score = item.get("score")

    return {
        "title": title if isinstance(title, str) else None,
        "link": url.strip(),
        "summary": text,
        "body": text,
        "published_at": _parse_time(item.get("time")),
        "author": author if isinstance(author, str) else None,
        "categories": list(source.categories) or list(DEFAULT_CATEGORIES),
        "external_id": str(item["id"]) if item.get("id") is not None else None,
        "popularity": score if isinstance(score, int) else 0,
    }


class HackerNewsAdapter(SourceAdapter):
    """Adapter for the Hacker News Firebase API.

    Fetches ``/topstories.json``, truncates to ``source.max_items``, then
    fetches ``/item/{id}.json`` one at a time. A failing item is counted and
    skipped; only a failing index fetch aborts the source.
    """

    def __init__(
        self,
        source: SourceConfig,
        client: httpx.AsyncClient | None = None,
        index_timeout: float = INDEX_TIMEOUT,
        item_timeout: float = ITEM_TIMEOUT,
        item_delay: float = ITEM_FETCH_DELAY,
    ) -> None:
        super().__init__(source, client)
        self.base_url = source.url.rstrip("/")
        self.index_timeout = index_timeout
        self.item_timeout = item_timeout
        self.item_delay = item_delay

    async def fetch_story_ids(self) -> list[int]:
        """Fetch the ordered top-story id list.

        Raises:
            FetchError: On network, timeout, HTTP or payload errors.
        """
        url = f"{self.base_url}/topstories.json"
        try:
            response = await self.client.get(url, timeout=self.index_timeout)
            response.raise_for_status()
            ids = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise FetchError(f"Failed to fetch story index {url}: {e}") from e

        if not isinstance(ids, list):
            raise FetchError(f"Story index {url} is not a list")
        return ids[: self.source.max_items]

    async def fetch_item(self, item_id: int) -> dict[str, Any] | None:
        """Fetch one item. Raises httpx.HTTPError or ValueError on failure."""
        response = await self.client.get(
            f"{self.base_url}/item/{item_id}.json",
            timeout=self.item_timeout,
        )
        response.raise_for_status()
        return response.json()

    async def fetch_candidates(self) -> FetchBatch:
        story_ids = await self.fetch_story_ids()
        batch = FetchBatch()

        for i, item_id in enumerate(story_ids):
            if i > 0:
                await asyncio.sleep(self.item_delay)

            try:
                raw = item_to_raw(await self.fetch_item(item_id), self.source)
            except (httpx.HTTPError, ValueError) as e:
                batch.failed += 1
                logger.warning("Failed to fetch or read item %s: %s", item_id, e)
                continue

            if raw is None:
                batch.skipped += 1
                continue
            batch.items.append(raw)

        logger.info(
            "Fetched %d stories from %s (%d skipped, %d failed)",
            len(batch.items),
            self.source.name.value,
            batch.skipped,
            batch.failed,
        )
        return batch
