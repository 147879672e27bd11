"""
Tech News API

Thin FastAPI backend over the article store: browsing, search, stats,
and admin triggers for the ingestion and translation stages.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from newsfeed.config import get_settings
from newsfeed.middleware import RequestIDMiddleware
from newsfeed.routers import admin, articles, stats
from newsfeed.services.article_store import open_store
from newsfeed.services.http_client import close_shared_client

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the article store for the lifetime of the app."""
    async with open_store(get_settings().database_url) as store:
        app.state.store = store
        try:
            yield
        finally:
            app.state.store = None
            await close_shared_client()


app = FastAPI(
    title="Tech News API",
    description="Tech news aggregated from several sources, machine-translated",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(articles.router, prefix="/api")
app.include_router(stats.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


async def _check_store() -> str:
    store = getattr(app.state, "store", None)
    if store is None:
        return "fail"
    try:
        await store.count()
    except SQLAlchemyError as e:
        logger.warning("Store health check failed: %s", e)
        return "fail"
    return "ok"


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check verifying the store and translation configuration."""
    s = get_settings()
    checks = {
        "store": await _check_store(),
        "translation": "ok" if s.deepl_api_key else "not_configured",
    }

    if checks["store"] != "ok":
        overall = "unavailable"
    elif checks["translation"] != "ok":
        overall = "degraded"
    else:
        overall = "ok"

    result: dict[str, Any] = {
        "status": overall,
        "service": "newsfeed-api",
        "version": "0.1.0",
        "checks": checks,
    }
    status_code = 200 if overall in ("ok", "degraded") else 503
    return JSONResponse(content=result, status_code=status_code)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "newsfeed.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
