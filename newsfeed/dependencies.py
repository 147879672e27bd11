"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request

from newsfeed.services.article_store import ArticleStore


def get_store(request: Request) -> ArticleStore:
    """Return the store opened by the application lifespan."""
    store: ArticleStore | None = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Article store unavailable")
    return store
