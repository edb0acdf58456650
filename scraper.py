"""
scraper.py — fetch readable text from the top search results.

Pages are fetched one at a time with a fixed pause between requests.
Every page either becomes a ScrapedPage or a ScrapeFailure; nothing here
raises to the caller. Fewer pages than requested is the normal failure mode.

HTML → text is regex based: drop <script>/<style> blocks, drop tags, decode
a handful of entities, collapse whitespace.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field

import aiohttp

from search_backends.base import SearchResult

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

_SCRIPT_RE     = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE      = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE        = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")

# Applied in this order, one str.replace pass each
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;",  "&"),
    ("&lt;",   "<"),
    ("&gt;",   ">"),
    ("&quot;", '"'),
    ("&#39;",  "'"),
)


def extract_text_from_html(html: str) -> str:
    """Strip markup from `html` and return whitespace-collapsed plain text."""
    if not html:
        return ""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return _WHITESPACE_RE.sub(" ", text).strip()


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScrapedPage:
    title: str
    url: str
    content: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url, "content": self.content}


@dataclass(frozen=True)
class ScrapeFailure:
    url: str
    reason: str


@dataclass
class ScrapeBatch:
    pages: list[ScrapedPage] = field(default_factory=list)
    failures: list[ScrapeFailure] = field(default_factory=list)


class _SkipPage(Exception):
    """Internal: the page was reachable but produced nothing usable."""


# ── Scraper ───────────────────────────────────────────────────────────────────

class PageScraper:

    def __init__(
        self,
        timeout: float = 10.0,
        max_chars: int = 3000,
        request_delay: float = 0.5,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._timeout = timeout
        self._max_chars = max_chars
        self._request_delay = request_delay
        self._headers = {"User-Agent": user_agent}

    async def fetch_pages(self, results: list[SearchResult], max_pages: int = 5) -> list[ScrapedPage]:
        """Scrape up to `max_pages` of `results` in order; only successes are returned."""
        return (await self.scrape(results, max_pages)).pages

    async def scrape(self, results: list[SearchResult], max_pages: int = 5) -> ScrapeBatch:
        batch = ScrapeBatch()
        targets = list(results[:max(max_pages, 0)])
        if not targets:
            return batch

        async with aiohttp.ClientSession(headers=self._headers) as session:
            for i, result in enumerate(targets):
                if i > 0:
                    await asyncio.sleep(self._request_delay)
                try:
                    content = await self._fetch_text(session, result.link)
                except _SkipPage as exc:
                    batch.failures.append(ScrapeFailure(result.link, str(exc)))
                    logger.info("Skipped %s: %s", result.link, exc)
                    continue
                except Exception as exc:
                    batch.failures.append(ScrapeFailure(result.link, f"{type(exc).__name__}: {exc}"))
                    logger.warning("Failed to scrape %s: %s", result.link, exc)
                    continue
                batch.pages.append(ScrapedPage(title=result.title, url=result.link, content=content))

        logger.info(
            "Scraped %d/%d pages (%d failed)",
            len(batch.pages), len(targets), len(batch.failures),
        )
        return batch

    async def _fetch_text(self, session: aiohttp.ClientSession, url: str) -> str:
        if not url:
            raise _SkipPage("missing url")
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=self._timeout)) as resp:
            if not 200 <= resp.status < 300:
                raise _SkipPage(f"http {resp.status}")
            html = await resp.text(errors="replace")
        text = extract_text_from_html(html)
        if not text:
            raise _SkipPage("empty content")
        return text[:self._max_chars]
