"""Translation services: DeepL client, optional expansion, backlog pipeline."""

from newsfeed.services.translation.deepl import DeepLClient, TranslationError
from newsfeed.services.translation.enrichment import (
    DeepLEnricher,
    Enricher,
    LLMEnricher,
    build_enricher,
    strip_preamble,
)
from newsfeed.services.translation.pipeline import TranslationPipeline

__all__ = [
    "DeepLClient",
    "DeepLEnricher",
    "Enricher",
    "LLMEnricher",
    "TranslationError",
    "TranslationPipeline",
    "build_enricher",
    "strip_preamble",
]
