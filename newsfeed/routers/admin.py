"""Admin triggers for the ingestion and translation stages.

All endpoints require ``X-Admin-Key`` to match the configured admin key;
an unset key disables them.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from newsfeed.config import get_settings
from newsfeed.dependencies import get_store
from newsfeed.services.article_store import ArticleStore
from newsfeed.services.runner import RunMode, execute

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class TranslateRequest(BaseModel):
    batch_size: int | None = Field(default=None, ge=1, le=100)


def require_admin_key(x_admin_key: str = Header(default="")) -> None:
    settings = get_settings()
    if not settings.admin_api_key or x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=403, detail="Invalid admin key")


@router.post("/fetch", dependencies=[Depends(require_admin_key)])
async def trigger_fetch(store: ArticleStore = Depends(get_store)):
    """Run ingestion over all enabled sources."""
    report = await execute(store, RunMode.FETCH, get_settings())
    return report.to_dict()


@router.post("/translate", dependencies=[Depends(require_admin_key)])
async def trigger_translate(
    body: TranslateRequest | None = None,
    store: ArticleStore = Depends(get_store),
):
    """Translate up to ``batch_size`` backlog articles (configured size by default)."""
    batch_size = body.batch_size if body else None
    report = await execute(store, RunMode.TRANSLATE, get_settings(), batch_size)
    return report.to_dict()


@router.post("/reset", dependencies=[Depends(require_admin_key)])
async def trigger_reset(store: ArticleStore = Depends(get_store)):
    """Return placeholder-translated articles to the backlog."""
    report = await execute(store, RunMode.RESET, get_settings())
    logger.info("Admin reset returned %d articles to the backlog", report.reset)
    return report.to_dict()
