"""
web_search.py — public interface for product web search.

The pipeline only uses:
  from web_search import SearchOrchestrator, build_backend

Backend is chosen from config.SEARCH_BACKEND:

  SEARCH_BACKEND=brave   →  Brave Search API
  SEARCH_BACKEND=google  →  Google Custom Search JSON API
  SEARCH_BACKEND=auto    →  Brave if BRAVE_API_KEY is set, else Google (default)

Fallback chain (run strictly one after another, only on failure):
  1. primary query                               e.g. "nutrition facts, ingredients for Acme Bar"
  2. "<product_name> nutrition facts ingredients"  if the product name is known
  3. raw barcode                                  if nothing succeeded yet
A failed attempt is never retried. Attempts 2 and 3 are each preceded by
the same fixed pause (SEARCH_FALLBACK_DELAY).
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import config
from image_analyzer import ProductAttributes
from search_backends.base import SearchBackend, SearchResult

logger = logging.getLogger(__name__)

__all__ = ["SearchAttempt", "SearchOrchestrator", "SearchOutcome", "build_backend"]


# ── Backend selection ─────────────────────────────────────────────────────────

def build_backend() -> SearchBackend:
    """Build the search backend from config. Raises RuntimeError if none is usable."""
    mode = config.SEARCH_BACKEND.lower()
    has_brave = bool(config.BRAVE_API_KEY)
    has_google = bool(config.GOOGLE_SEARCH_API_KEY and config.GOOGLE_SEARCH_ENGINE_ID)

    if mode == "brave":
        if not has_brave:
            raise RuntimeError("SEARCH_BACKEND=brave but BRAVE_API_KEY is not set.")
        return _make_brave()

    if mode == "google":
        if not has_google:
            raise RuntimeError(
                "SEARCH_BACKEND=google but GOOGLE_SEARCH_API_KEY / "
                "GOOGLE_SEARCH_ENGINE_ID are not set."
            )
        return _make_google()

    # auto mode: Brave → Google
    if has_brave:
        logger.info("Auto-selected Brave Search backend")
        return _make_brave()
    if has_google:
        logger.info("Auto-selected Google Custom Search backend")
        return _make_google()

    raise RuntimeError(
        "No search backend configured. Set BRAVE_API_KEY, or "
        "GOOGLE_SEARCH_API_KEY + GOOGLE_SEARCH_ENGINE_ID."
    )


def _make_brave() -> SearchBackend:
    from search_backends.brave_backend import BraveBackend
    return BraveBackend(api_key=config.BRAVE_API_KEY, timeout=config.SEARCH_TIMEOUT)


def _make_google() -> SearchBackend:
    from search_backends.google_backend import GoogleBackend
    return GoogleBackend(
        api_key=config.GOOGLE_SEARCH_API_KEY,
        engine_id=config.GOOGLE_SEARCH_ENGINE_ID,
        timeout=config.SEARCH_TIMEOUT,
    )


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SearchAttempt:
    """One search call made by the orchestrator (for logs / debug output)."""
    label: str                  # primary | product_name | barcode
    query: str
    ok: bool
    result_count: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "strategy":    self.label,
            "query":       self.query,
            "ok":          self.ok,
            "resultCount": self.result_count,
            "error":       self.error,
        }


@dataclass
class SearchOutcome:
    results: list[SearchResult] = field(default_factory=list)
    attempts: list[SearchAttempt] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return any(a.ok for a in self.attempts)


# ── Orchestrator ──────────────────────────────────────────────────────────────

class SearchOrchestrator:
    """Runs a search with the product-name / barcode fallback chain. Never raises."""

    def __init__(
        self,
        backend: SearchBackend,
        result_count: int = 8,
        call_timeout: float = 15.0,
        fallback_delay: float = 0.4,
    ) -> None:
        self._backend = backend
        self._result_count = result_count
        self._call_timeout = call_timeout
        self._fallback_delay = fallback_delay

    @property
    def backend_name(self) -> str:
        return self._backend.name

    async def search(self, query: str, attrs: ProductAttributes) -> list[SearchResult]:
        return (await self.search_with_attempts(query, attrs)).results

    async def search_with_attempts(self, query: str, attrs: ProductAttributes) -> SearchOutcome:
        outcome = SearchOutcome()

        if await self._attempt(outcome, "primary", query):
            return outcome

        pname = attrs.product_name or ""
        if pname and pname != query:
            await asyncio.sleep(self._fallback_delay)
            if await self._attempt(outcome, "product_name", f"{pname} nutrition facts ingredients"):
                return outcome

        if attrs.barcode and not outcome.succeeded:
            await asyncio.sleep(self._fallback_delay)
            await self._attempt(outcome, "barcode", attrs.barcode)

        if not outcome.succeeded:
            logger.warning(
                "[%s] All %d search attempt(s) failed for '%s'",
                self._backend.name, len(outcome.attempts), query,
            )
        return outcome

    async def _attempt(self, outcome: SearchOutcome, label: str, query: str) -> bool:
        """Run one search call; record it on `outcome`. Returns True on success."""
        try:
            results = await asyncio.wait_for(
                self._backend.search(query, self._result_count),
                timeout=self._call_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("[%s] %s search timed out after %.1fs: '%s'",
                           self._backend.name, label, self._call_timeout, query)
            outcome.attempts.append(SearchAttempt(label, query, ok=False, error="timeout"))
            return False
        except Exception as exc:
            logger.warning("[%s] %s search failed: %s", self._backend.name, label, exc)
            outcome.attempts.append(SearchAttempt(label, query, ok=False, error=str(exc)[:200]))
            return False

        results = list(results or [])
        outcome.results.extend(results)
        outcome.attempts.append(SearchAttempt(label, query, ok=True, result_count=len(results)))
        logger.info("[%s] %s '%s' → %d results", self._backend.name, label, query, len(results))
        return True
