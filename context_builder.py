"""
Format search results and scraped pages into bounded text blocks for the
synthesis prompt. Snippet and page-content caps are independent.
"""
from __future__ import annotations

import re

from scraper import ScrapedPage
from search_backends.base import SearchResult

NO_CONTEXT = "No web content could be retrieved for this product."

_WHITESPACE_RE = re.compile(r"\s+")


def _squash(text: str, limit: int) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()[:limit]


def format_search_results(
    results: list[SearchResult],
    max_results: int = 5,
    max_snippet: int = 300,
) -> str:
    return "\n\n".join(
        f"{i}. Title: {r.title}\n   Snippet: {_squash(r.snippet, max_snippet)}\n   URL: {r.link}"
        for i, r in enumerate(results[:max_results], start=1)
    )


def format_scraped_content(
    pages: list[ScrapedPage],
    max_results: int = 5,
    max_content: int = 2000,
) -> str:
    return "\n\n".join(
        f"{i}. Title: {p.title}\n   URL: {p.url}\n   Content: {_squash(p.content, max_content)}"
        for i, p in enumerate(pages[:max_results], start=1)
    )


def build_context_block(
    pages: list[ScrapedPage],
    results: list[SearchResult],
    max_results: int = 5,
    max_content: int = 2000,
    max_snippet: int = 300,
) -> str:
    """Scraped pages when we have any, search snippets otherwise."""
    if pages:
        return format_scraped_content(pages, max_results, max_content)
    if results:
        return format_search_results(results, max_results, max_snippet)
    return NO_CONTEXT
