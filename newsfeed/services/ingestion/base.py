"""Adapter contract shared by every upstream source."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypedDict

import httpx

from newsfeed.services.http_client import get_shared_client
from newsfeed.services.ingestion.sources import SourceConfig


class FetchError(Exception):
    """An adapter could not obtain its source document or index."""

    pass


class RawItem(TypedDict):
    """Source-native item data before normalization."""

    title: str | None
    link: str | None
    summary: str
    body: str
    published_at: datetime | None
    author: str | None
    categories: list[str]
    external_id: str | None
    popularity: int


@dataclass
class FetchBatch:
    """Items an adapter produced in one run, plus what it passed over.

    ``skipped`` counts items intentionally dropped (no link, wrong type);
    ``failed`` counts individual item fetches that errored.
    """

    items: list[RawItem] = field(default_factory=list)
    skipped: int = 0
    failed: int = 0


class SourceAdapter(ABC):
    """Reads one upstream and yields raw items for normalization."""

    def __init__(
        self,
        source: SourceConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.source = source
        self.name = source.name
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_shared_client()

    @abstractmethod
    async def fetch_candidates(self) -> FetchBatch:
        """Fetch raw items from the upstream.

        Raises:
            FetchError: If the upstream document or index cannot be fetched.
        """
        pass
