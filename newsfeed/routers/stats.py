"""Aggregate counts over the article store."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from newsfeed.dependencies import get_store
from newsfeed.models.article import CategoryCount
from newsfeed.services.article_store import ArticleStore

router = APIRouter(tags=["stats"])


@router.get("/categories", response_model=list[CategoryCount])
async def list_categories(store: ArticleStore = Depends(get_store)):
    """Categories of translated articles, most frequent first."""
    counts = await store.count_by("categories", {"is_translated": True})
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [CategoryCount(name=name, count=n) for name, n in ranked]


@router.get("/sources")
async def list_sources(store: ArticleStore = Depends(get_store)):
    """Stored and translated article counts per source."""
    totals = await store.count_by("source_name")
    translated = await store.count_by("source_name", {"is_translated": True})
    return [
        {"name": name, "total": total, "translated": translated.get(name, 0)}
        for name, total in sorted(totals.items())
    ]


@router.get("/stats")
async def article_stats(store: ArticleStore = Depends(get_store)):
    """Store-wide totals and freshness."""
    total = await store.count()
    translated = await store.count({"is_translated": True})

    midnight = datetime.now(timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    newest = await store.newest()

    return {
        "total_articles": total,
        "translated_articles": translated,
        "untranslated_articles": total - translated,
        "today_articles": await store.count_created_since(midnight),
        "last_update": newest.published_at if newest else None,
    }
