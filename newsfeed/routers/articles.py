"""Article feed endpoints."""

import math

from fastapi import APIRouter, Depends, HTTPException, Query

from newsfeed.dependencies import get_store
from newsfeed.models.article import Article, ArticleIndex, ArticleSummary, Pagination, SourceName
from newsfeed.services.article_store import ArticleStore

router = APIRouter(tags=["articles"])


@router.get("/articles", response_model=ArticleIndex)
async def list_articles(
    category: str | None = Query(
        default=None,
        description="Only articles tagged with this category ('all' for no filter)",
    ),
    source: SourceName | None = Query(default=None, description="Only this source"),
    translated: bool = Query(
        default=True,
        description="Only articles whose translation stage has run",
    ),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    store: ArticleStore = Depends(get_store),
):
    """List articles newest first."""
    filters: dict = {}
    if translated:
        filters["is_translated"] = True
    if category and category != "all":
        filters["categories"] = category
    if source is not None:
        filters["source_name"] = source.value

    articles = await store.find_many(filters, offset=offset, limit=limit)
    total = await store.count(filters)

    return ArticleIndex(
        articles=[ArticleSummary.model_validate(a.model_dump()) for a in articles],
        total=total,
        pagination=Pagination(
            current_page=offset // limit + 1,
            total_pages=math.ceil(total / limit),
            total_count=total,
            has_next=offset + len(articles) < total,
        ),
    )


@router.get("/articles/{article_id}", response_model=Article)
async def get_article_by_id(article_id: int, store: ArticleStore = Depends(get_store)):
    """Get a single article by ID."""
    article = await store.get(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


@router.get("/search", response_model=list[ArticleSummary])
async def search_articles(
    q: str = Query(min_length=1, description="Case-insensitive search keyword"),
    limit: int = Query(default=10, ge=1, le=50),
    store: ArticleStore = Depends(get_store),
):
    """Search translated articles by title, summary, or category."""
    return await store.search(q.strip(), limit=limit)
