"""
Brave Search API backend.

Sign up at: https://api.search.brave.com
The free plan allows 1 query/second; web_search.py pauses between
fallback attempts.

Response shape (only the fields we use):
  {"web": {"results": [{"title": ..., "url": ..., "description": ...}]}}
"""
from __future__ import annotations

import logging

import aiohttp

from search_backends.base import SearchBackend, SearchResult

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"

# Brave rejects count > 20
_MAX_COUNT = 20


class BraveBackend(SearchBackend):

    def __init__(self, api_key: str, timeout: float = 15.0) -> None:
        self._headers = {
            "Accept":               "application/json",
            "X-Subscription-Token": api_key,
        }
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "Brave Search"

    async def search(self, query: str, count: int = 6) -> list[SearchResult]:
        params = {"q": query, "count": str(min(count, _MAX_COUNT))}

        async with aiohttp.ClientSession() as session:
            async with session.get(
                SEARCH_URL,
                headers=self._headers,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status != 200:
                    text = await resp.text()
                    raise RuntimeError(f"Brave API error {resp.status}: {text[:200]}")
                data = await resp.json()

        raw_results = ((data or {}).get("web") or {}).get("results") or []
        results = [_parse_result(r) for r in raw_results if isinstance(r, dict)]
        logger.info("Brave returned %d results for query '%s'", len(results), query)
        return results[:count]


def _parse_result(raw: dict) -> SearchResult:
    return SearchResult(
        title=raw.get("title") or "",
        link=raw.get("url") or "",
        snippet=raw.get("description") or "",
    )
