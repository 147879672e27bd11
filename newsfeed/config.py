"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    debug: bool = False
    log_level: str = "INFO"

    # CORS (the article browser SPA)
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Record store (any SQLAlchemy async URL)
    database_url: str = "sqlite+aiosqlite:///./newsfeed.db"

    # Sources
    sources_file: str | None = None  # defaults to config/sources.yaml
    max_items_per_source: int = 30
    item_fetch_delay_seconds: float = 0.1
    feed_timeout_seconds: float = 10.0
    item_timeout_seconds: float = 5.0

    # DeepL — empty key means "translation not configured"
    deepl_api_key: str = ""
    deepl_free_url: str = "https://api-free.deepl.com/v2/translate"
    deepl_pro_url: str = "https://api.deepl.com/v2/translate"
    translation_target_lang: str = "JA"
    translation_source_lang: str | None = None
    translation_timeout_seconds: float = 15.0
    translation_delay_seconds: float = 1.0
    translation_batch_size: int = 5

    # Optional second-stage summary expansion
    enrichment_backend: Literal["none", "deepl", "llm"] = "none"
    enrichment_min_length: int = 120

    # OpenAI-compatible endpoint for the "llm" enrichment backend
    openai_endpoint: str = ""
    openai_api_key: str = ""
    openai_model: str = "gpt-4.1-mini"

    # Admin API key (protects POST /api/admin/*)
    admin_api_key: str = ""

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
