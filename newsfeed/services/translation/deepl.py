"""DeepL translation client."""

import logging

import httpx

from newsfeed.config import Settings, get_settings
from newsfeed.services.http_client import get_shared_client

logger = logging.getLogger(__name__)

# Keys ending with this suffix belong to the free tier
FREE_KEY_SUFFIX = ":fx"

FREE_API_URL = "https://api-free.deepl.com/v2/translate"
PRO_API_URL = "https://api.deepl.com/v2/translate"


class TranslationError(Exception):
    """A single translation call failed."""

    pass


class DeepLClient:
    """Minimal DeepL v2 ``/translate`` client.

    An empty ``api_key`` is a valid state: ``configured`` is False and callers
    are expected to skip translation rather than call ``translate``.
    """

    def __init__(
        self,
        api_key: str = "",
        target_lang: str = "JA",
        source_lang: str | None = None,
        timeout: float = 15.0,
        free_url: str = FREE_API_URL,
        pro_url: str = PRO_API_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key.strip()
        self.target_lang = target_lang
        self.source_lang = source_lang
        self.timeout = timeout
        self.free_url = free_url
        self.pro_url = pro_url
        self._client = client

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, client: httpx.AsyncClient | None = None
    ) -> "DeepLClient":
        settings = settings or get_settings()
        return cls(
            api_key=settings.deepl_api_key,
            target_lang=settings.translation_target_lang,
            source_lang=settings.translation_source_lang,
            timeout=settings.translation_timeout_seconds,
            free_url=settings.deepl_free_url,
            pro_url=settings.deepl_pro_url,
            client=client,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def is_free_key(self) -> bool:
        return self.api_key.endswith(FREE_KEY_SUFFIX)

    @property
    def api_url(self) -> str:
        return self.free_url if self.is_free_key else self.pro_url

    async def translate(
        self,
        text: str,
        target_lang: str | None = None,
        source_lang: str | None = None,
    ) -> str:
        """Translate ``text`` and return the first translation.

        Raises:
            TranslationError: If no key is configured, or on network, timeout,
                non-2xx, or malformed-response failures.
        """
        if not self.configured:
            raise TranslationError("DeepL API key is not configured")

        data = {
            "auth_key": self.api_key,
            "text": text,
            "target_lang": target_lang or self.target_lang,
        }
        source = source_lang or self.source_lang
        if source:
            data["source_lang"] = source

        client = self._client or get_shared_client()
        try:
            response = await client.post(
                self.api_url,
                data=data,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TranslationError(f"DeepL request failed: {e}") from e

        if response.status_code != 200:
            # Body usually carries a JSON "message" explaining quota/auth errors
            raise TranslationError(
                f"DeepL returned {response.status_code}: {response.text[:200]}"
            )

        try:
            translations = response.json()["translations"]
            return translations[0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise TranslationError(f"Malformed DeepL response: {e}") from e
