"""
Google Custom Search JSON API backend.

Needs an API key and a Programmable Search Engine id (cx):
  https://developers.google.com/custom-search/v1/overview
Free tier: 100 queries/day. The API returns at most 10 items per call.
"""
from __future__ import annotations

import logging

import aiohttp

from search_backends.base import SearchBackend, SearchResult

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.googleapis.com/customsearch/v1"

_MAX_COUNT = 10


class GoogleBackend(SearchBackend):

    def __init__(self, api_key: str, engine_id: str, timeout: float = 15.0) -> None:
        self._key = api_key
        self._engine_id = engine_id
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "Google Custom Search"

    async def search(self, query: str, count: int = 6) -> list[SearchResult]:
        params = {
            "key": self._key,
            "cx":  self._engine_id,
            "q":   query,
            "num": str(max(1, min(count, _MAX_COUNT))),
        }

        async with aiohttp.ClientSession() as session:
            async with session.get(
                SEARCH_URL,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise RuntimeError(f"Google Search error {resp.status}: {text[:200]}")
                data = await resp.json()

        items = (data or {}).get("items") or []
        results = [
            SearchResult(
                title=item.get("title") or "",
                link=item.get("link") or "",
                snippet=item.get("snippet") or "",
            )
            for item in items
            if isinstance(item, dict)
        ]
        logger.info("Google returned %d results for query '%s'", len(results), query)
        return results[:count]
