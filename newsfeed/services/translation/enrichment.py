"""Optional second pass that expands a short translated summary.

The expansion step is isolated behind ``Enricher`` so the fragile
prompt-echo approach (``DeepLEnricher``) can be swapped for structured
prompting (``LLMEnricher``) without touching the translation pipeline.
"""

import json
import logging
from typing import Protocol

from openai import APIError, AsyncOpenAI

from newsfeed.config import Settings, get_settings
from newsfeed.services.translation.deepl import DeepLClient, TranslationError

logger = logging.getLogger(__name__)

# Colon in Latin and full-width (CJK) script
PREAMBLE_DELIMITERS = (":", "：")

# Instruction prepended to the text for the echo-style expansion, per target language
EXPAND_INSTRUCTIONS = {
    "JA": "次の文章を、内容を補いながらより詳しく説明してください：",
    "EN": "Explain the following text in more detail:",
}

LANGUAGE_NAMES = {
    "JA": "Japanese",
    "EN": "English",
    "DE": "German",
    "FR": "French",
}

EXPAND_PROMPT = (
    "You edit a technology news digest written in {language}.\n"
    "Rewrite the summary below as a fuller paraphrase of roughly "
    "{target_length} characters, in {language}. Do not add facts that "
    "are not implied by the summary.\n"
    "\n"
    "Summary:\n"
    "{text}\n"
    "\n"
    "Respond with valid JSON in this exact format:\n"
    '{{"text": "the expanded summary"}}'
)


class Enricher(Protocol):
    """Expands already-translated text in the same language."""

    async def expand(self, text: str) -> str:
        """Return an expanded paraphrase of ``text``.

        Raises:
            TranslationError: If the expansion could not be obtained.
        """
        ...


def strip_preamble(response: str, fallback: str) -> str:
    """Drop an echoed instruction preceding the payload.

    Everything up to and including the last colon (either script) is
    removed. Returns ``fallback`` when no delimiter is present or stripping
    leaves nothing usable.
    """
    cut = max(response.rfind(d) for d in PREAMBLE_DELIMITERS)
    if cut < 0:
        return fallback

    payload = response[cut + 1 :].strip()
    if not payload or payload == response.strip():
        return fallback
    return payload


class DeepLEnricher:
    """Expansion via a same-language DeepL pass over an instruction-prefixed text."""

    def __init__(self, client: DeepLClient, instruction: str | None = None) -> None:
        self.client = client
        self.instruction = instruction or EXPAND_INSTRUCTIONS.get(
            client.target_lang.upper(), EXPAND_INSTRUCTIONS["EN"]
        )

    async def expand(self, text: str) -> str:
        response = await self.client.translate(f"{self.instruction}{text}")
        return strip_preamble(response, fallback=text)


class LLMEnricher:
    """Expansion via an OpenAI-compatible chat model returning JSON."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        target_lang: str = "JA",
        target_length: int = 200,
    ) -> None:
        self.client = client
        self.model = model
        self.language = LANGUAGE_NAMES.get(target_lang.upper(), target_lang)
        self.target_length = target_length

    async def expand(self, text: str) -> str:
        prompt = EXPAND_PROMPT.format(
            language=self.language,
            target_length=self.target_length,
            text=text,
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=800,
                temperature=0.3,
            )
        except APIError as e:
            raise TranslationError(f"LLM API error: {e}") from e

        try:
            content = response.choices[0].message.content or ""
        except (IndexError, AttributeError, TypeError) as e:
            raise TranslationError(f"No completion in response: {e}") from e

        try:
            expanded = json.loads(content)["text"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise TranslationError(f"Invalid JSON response: {e}") from e

        if not isinstance(expanded, str) or not expanded.strip():
            raise TranslationError("Empty expansion")
        return expanded.strip()


def build_enricher(
    settings: Settings | None = None,
    deepl: DeepLClient | None = None,
) -> Enricher | None:
    """Return the configured enricher, or None when expansion is disabled."""
    settings = settings or get_settings()
    backend = settings.enrichment_backend

    if backend == "deepl":
        return DeepLEnricher(deepl or DeepLClient.from_settings(settings))
    if backend == "llm":
        if not settings.openai_api_key:
            logger.warning("LLM enrichment selected but no API key set; disabled")
            return None
        client = AsyncOpenAI(
            base_url=settings.openai_endpoint or None,
            api_key=settings.openai_api_key,
        )
        return LLMEnricher(
            client,
            model=settings.openai_model,
            target_lang=settings.translation_target_lang,
            target_length=settings.enrichment_min_length * 2,
        )
    return None
