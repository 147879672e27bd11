"""Unit tests for the feed adapter — parsing, capping, dates, fetch errors."""

from dataclasses import replace
from datetime import datetime, timezone

import feedparser
import httpx
import pytest

from newsfeed.services.ingestion.base import FetchError
from newsfeed.services.ingestion.rss import (
    MAX_SUMMARY_LENGTH,
    FeedAdapter,
    _extract_summary,
    _parse_published_date,
    parse_feed_entries,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_rss_feed() -> str:
    return """\
<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Test Feed</title>
    <item>
      <title>RSS Article One</title>
      <link>https://example.com/rss-1</link>
      <description>&lt;p&gt;First &lt;b&gt;RSS&lt;/b&gt; article.&lt;/p&gt;</description>
      <content:encoded>&lt;p&gt;Full body of the first article.&lt;/p&gt;</content:encoded>
      <dc:creator>Jane Writer</dc:creator>
      <category>AI</category>
      <category>Startups</category>
      <category>AI</category>
      <pubDate>Sat, 15 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>RSS Article Two</title>
      <link>https://example.com/rss-2</link>
      <description>Second RSS article.</description>
      <pubDate>Sat, 15 Feb 2026 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>No link here</title>
      <description>This entry has no link.</description>
    </item>
  </channel>
</rss>"""


@pytest.fixture
def sample_atom_feed() -> str:
    return """\
<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <updated>2026-02-15T10:00:00Z</updated>
  <entry>
    <title>Atom Article One</title>
    <link href="https://example.com/atom-1"/>
    <id>urn:uuid:atom-article-1</id>
    <updated>2026-02-15T10:00:00Z</updated>
    <summary>Summary of the first Atom article.</summary>
  </entry>
</feed>"""


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# parse_feed_entries
# ---------------------------------------------------------------------------


class TestParseFeedEntries:
    def test_parses_rss_items(self, sample_rss_feed, feed_source):
        batch = parse_feed_entries(sample_rss_feed, feed_source)

        assert len(batch.items) == 2
        first = batch.items[0]
        assert first["title"] == "RSS Article One"
        assert first["link"] == "https://example.com/rss-1"
        assert first["summary"] == "First RSS article."
        assert first["body"] == "Full body of the first article."
        assert first["author"] == "Jane Writer"
        assert first["published_at"] == datetime(2026, 2, 15, 10, tzinfo=timezone.utc)
        assert first["external_id"] is None
        assert first["popularity"] == 0

    def test_counts_linkless_entries_as_skipped(self, sample_rss_feed, feed_source):
        batch = parse_feed_entries(sample_rss_feed, feed_source)
        assert batch.skipped == 1
        assert batch.failed == 0

    def test_categories_from_tags_deduplicated(self, sample_rss_feed, feed_source):
        batch = parse_feed_entries(sample_rss_feed, feed_source)
        assert batch.items[0]["categories"] == ["AI", "Startups"]

    def test_categories_fall_back_to_source(self, sample_rss_feed, feed_source):
        batch = parse_feed_entries(sample_rss_feed, feed_source)
        assert batch.items[1]["categories"] == ["Tech"]

    def test_parses_atom_entries(self, sample_atom_feed, feed_source):
        batch = parse_feed_entries(sample_atom_feed, feed_source)

        assert len(batch.items) == 1
        assert batch.items[0]["link"] == "https://example.com/atom-1"
        assert batch.items[0]["published_at"] == datetime(
            2026, 2, 15, 10, tzinfo=timezone.utc
        )

    def test_caps_at_max_items(self, sample_rss_feed, feed_source):
        batch = parse_feed_entries(sample_rss_feed, replace(feed_source, max_items=1))
        assert len(batch.items) == 1
        assert batch.skipped == 0

    def test_empty_title_becomes_none(self, feed_source):
        feed = """<rss version="2.0"><channel>
            <item><title></title><link>https://example.com/x</link></item>
        </channel></rss>"""
        batch = parse_feed_entries(feed, feed_source)
        assert batch.items[0]["title"] is None

    @pytest.mark.parametrize(
        "document", ["not xml at all", "<html>Service unavailable</html>"]
    )
    def test_non_feed_document_raises(self, feed_source, document):
        with pytest.raises(FetchError, match="Unparseable feed"):
            parse_feed_entries(document, feed_source)

    def test_empty_channel_yields_empty_batch(self, feed_source):
        feed = """<rss version="2.0"><channel><title>Quiet</title></channel></rss>"""
        batch = parse_feed_entries(feed, feed_source)
        assert batch.items == []
        assert batch.skipped == 0


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


class TestExtractSummary:
    def test_truncates_long_summary(self):
        entry = feedparser.FeedParserDict(summary="word " * 200)
        summary = _extract_summary(entry)
        assert len(summary) == MAX_SUMMARY_LENGTH
        assert summary.endswith("...")

    def test_falls_back_to_description(self):
        entry = feedparser.FeedParserDict(description="From description")
        assert _extract_summary(entry) == "From description"

    def test_missing_summary_is_empty(self):
        assert _extract_summary(feedparser.FeedParserDict()) == ""


class TestParsePublishedDate:
    def test_missing_date_returns_none(self):
        assert _parse_published_date(feedparser.FeedParserDict()) is None

    def test_uses_updated_when_no_published(self):
        entry = feedparser.FeedParserDict(
            updated_parsed=(2026, 1, 2, 3, 4, 5, 0, 0, 0)
        )
        assert _parse_published_date(entry) == datetime(
            2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )


# ---------------------------------------------------------------------------
# FeedAdapter
# ---------------------------------------------------------------------------


class TestFeedAdapter:
    async def test_fetch_candidates(self, sample_rss_feed, feed_source):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=sample_rss_feed)

        async with _mock_client(handler) as client:
            batch = await FeedAdapter(feed_source, client=client).fetch_candidates()

        assert requested == ["https://example.com/feed.xml"]
        assert [i["link"] for i in batch.items] == [
            "https://example.com/rss-1",
            "https://example.com/rss-2",
        ]

    async def test_http_error_raises_fetch_error(self, feed_source):
        async with _mock_client(lambda r: httpx.Response(503)) as client:
            with pytest.raises(FetchError):
                await FeedAdapter(feed_source, client=client).fetch_candidates()

    async def test_network_error_raises_fetch_error(self, feed_source):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        async with _mock_client(handler) as client:
            with pytest.raises(FetchError, match="Failed to fetch feed"):
                await FeedAdapter(feed_source, client=client).fetch_feed()
