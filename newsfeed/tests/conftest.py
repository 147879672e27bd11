"""Shared fixtures for newsfeed tests."""

from datetime import datetime, timezone

import pytest

from newsfeed.models.article import ArticleCandidate, SourceName
from newsfeed.services.article_store import open_store
from newsfeed.services.ingestion.sources import AdapterKind, SourceConfig


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from newsfeed.config import get_settings

    get_settings.cache_clear()

    # 2. HTTP client singleton
    import newsfeed.services.http_client as http_mod

    http_mod._client = None


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def store(db_url):
    """An empty article store backed by a throwaway SQLite file."""
    async with open_store(db_url) as s:
        yield s


@pytest.fixture
def mock_settings(monkeypatch, db_url):
    """Provide a Settings object with safe test defaults."""
    from newsfeed.config import Settings, get_settings

    test_settings = Settings(
        _env_file=None,
        database_url=db_url,
        deepl_api_key="test-key:fx",
        translation_delay_seconds=0,
        item_fetch_delay_seconds=0,
        enrichment_backend="none",
        admin_api_key="test-admin-key",
    )

    get_settings.cache_clear()
    monkeypatch.setattr("newsfeed.config.get_settings", lambda: test_settings)

    # Modules that did ``from newsfeed.config import get_settings`` hold their
    # own binding, so patch each one
    for mod_path in [
        "newsfeed.main",
        "newsfeed.routers.admin",
        "newsfeed.services.runner",
        "newsfeed.services.ingestion.orchestrator",
        "newsfeed.services.ingestion.adapters",
        "newsfeed.services.translation.deepl",
        "newsfeed.services.translation.enrichment",
        "newsfeed.services.translation.pipeline",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
def feed_source() -> SourceConfig:
    return SourceConfig(
        name=SourceName.TECHCRUNCH,
        kind=AdapterKind.FEED,
        url="https://example.com/feed.xml",
        max_items=30,
        categories=["Tech"],
    )


@pytest.fixture
def hn_source() -> SourceConfig:
    return SourceConfig(
        name=SourceName.HACKER_NEWS,
        kind=AdapterKind.TREE_API,
        url="https://hn.example.com/v0",
        max_items=3,
        categories=["Technology", "Programming"],
    )


def _make_candidate(n: int, **overrides) -> ArticleCandidate:
    """Build a distinct candidate; ``n`` also orders published_at."""
    data = {
        "title": f"Article {n}",
        "summary": f"Summary of article {n}",
        "source_url": f"https://example.com/articles/{n}",
        "published_at": datetime(2026, 3, 1, n % 24, tzinfo=timezone.utc),
        "categories": ["AI"],
        "source_name": SourceName.TECHCRUNCH,
    }
    data.update(overrides)
    return ArticleCandidate(**data)


@pytest.fixture
def make_candidate():
    return _make_candidate
