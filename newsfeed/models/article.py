"""Article data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class SourceName(str, Enum):
    """Upstream sources an article can come from."""

    TECHCRUNCH = "TechCrunch"
    ARS_TECHNICA = "Ars Technica"
    HACKER_NEWS = "Hacker News"


class ArticleCandidate(BaseModel):
    """A normalized article produced by a source adapter, not yet persisted."""

    title: str
    summary: str = ""
    body: str = ""
    source_url: str
    published_at: datetime
    author: str = "Unknown"
    categories: list[str] = []
    external_id: str | None = None
    source_name: SourceName
    popularity_score: int = 0
    estimated_read_minutes: int = Field(default=1, ge=1)


class ArticleSummary(BaseModel):
    """Article as listed by the read API (no full body)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    title_translated: str | None = None
    summary: str = ""
    summary_translated: str | None = None
    source_url: str
    published_at: datetime
    author: str = "Unknown"
    categories: list[str] = []
    source_name: SourceName
    popularity_score: int = 0
    is_translated: bool = False
    translated_at: datetime | None = None
    estimated_read_minutes: int = 1

    @computed_field
    @property
    def display_title(self) -> str:
        return self.title_translated or self.title

    @computed_field
    @property
    def display_summary(self) -> str:
        return self.summary_translated or self.summary


class Article(ArticleSummary):
    """Full stored article record."""

    body: str = ""
    external_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Pagination(BaseModel):
    """Paging metadata for list responses."""

    current_page: int
    total_pages: int
    total_count: int
    has_next: bool


class ArticleIndex(BaseModel):
    """Article feed page."""

    articles: list[ArticleSummary]
    total: int
    pagination: Pagination | None = None


class CategoryCount(BaseModel):
    name: str
    count: int
