"""
analysis.py — the comprehensive food-label analysis pipeline.

One call to AnalysisPipeline.analyze_comprehensive(image_url) runs:

  image URL
    → vision call            (LLMProvider.analyse_image)
    → ProductAttributes      (degrades to empty attributes on unusable JSON)
    → search query           (query_builder)
    → web search             (SearchOrchestrator, with fallback chain)
    → top results scraped    (PageScraper, sequential + throttled)
    → context block          (context_builder)
    → synthesis call         (LLMProvider.complete)
    → AnalysisReport | PartialFailure

Every stage runs after the previous one finishes. Nothing is stored on the
pipeline between calls, so one instance can serve concurrent requests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

import config
from context_builder import build_context_block
from errors import ExternalCallFailed, MalformedJson, NoJsonFound
from image_analyzer import ProductAttributes, validate_image_url
from prompts import SYNTHESIS_SYSTEM_PROMPT, build_synthesis_user_prompt
from providers.base import LLMProvider
from query_builder import build_search_query
from scraper import PageScraper, ScrapedPage
from search_backends.base import SearchResult
from text_extraction import extract_json, try_extract_json
from web_search import SearchAttempt, SearchOrchestrator

logger = logging.getLogger(__name__)

PARTIAL_FAILURE_MESSAGE = "Failed to parse comprehensive analysis response"

# Keys the synthesis reply must carry (inside "data" when it is wrapped)
_REQUIRED_OBJECTS = ("product_info", "nutrition_facts")
_REQUIRED_LISTS = ("ingredients",)


# ── Result types ──────────────────────────────────────────────────────────────

@dataclass
class AnalysisReport:
    """Successful analysis: the validated synthesis JSON plus a debug block."""
    payload: dict
    debug: dict = field(default_factory=dict)
    synthesis_failed: bool = field(default=False, init=False)

    def to_dict(self) -> dict:
        return {**self.payload, "debug": self.debug}


@dataclass
class PartialFailure:
    """
    Synthesis produced nothing usable. Carries the intermediate state so the
    caller can retry or debug.
    """
    product: ProductAttributes
    search_query: str
    search_results: list[SearchResult]
    reason: str                 # no_json | malformed_json | schema_mismatch | synthesis_call_failed
    detail: Optional[str] = None
    synthesis_failed: bool = field(default=True, init=False)

    def to_dict(self) -> dict:
        return {
            "error":           PARTIAL_FAILURE_MESSAGE,
            "reason":          self.reason,
            "synthesisFailed": True,
            "productData":     self.product.to_dict(),
            "searchQuery":     self.search_query,
            "searchResults":   [r.to_dict() for r in self.search_results],
        }


AnalysisOutcome = Union[AnalysisReport, PartialFailure]


def report_body(payload: dict) -> dict:
    """The report object itself — unwraps {"status":..., "data": {...}} replies."""
    data = payload.get("data")
    return data if isinstance(data, dict) else payload


def missing_report_fields(payload) -> list[str]:
    """Names of required top-level report fields that are absent or mistyped."""
    if not isinstance(payload, dict):
        return ["<object>"]
    body = report_body(payload)
    missing = [k for k in _REQUIRED_OBJECTS if not isinstance(body.get(k), dict)]
    missing += [k for k in _REQUIRED_LISTS if not isinstance(body.get(k), list)]
    return missing


# ── Pipeline ──────────────────────────────────────────────────────────────────

class AnalysisPipeline:

    def __init__(
        self,
        vision: LLMProvider,
        synthesis: LLMProvider,
        orchestrator: SearchOrchestrator,
        scraper: PageScraper,
        top_results: int = 6,
        max_pages: int = 5,
        context_max_results: int = 5,
        context_max_content: int = 2000,
        context_max_snippet: int = 300,
        synthesis_temperature: float = 0.1,
        synthesis_max_tokens: int = 1500,
        validate_images: bool = False,
    ) -> None:
        self._vision = vision
        self._synthesis = synthesis
        self._orchestrator = orchestrator
        self._scraper = scraper
        self._top_results = top_results
        self._max_pages = max_pages
        self._context_max_results = context_max_results
        self._context_max_content = context_max_content
        self._context_max_snippet = context_max_snippet
        self._synthesis_temperature = synthesis_temperature
        self._synthesis_max_tokens = synthesis_max_tokens
        self._validate_images = validate_images

    async def analyze_comprehensive(self, image_url: str) -> AnalysisOutcome:
        """
        Run the full pipeline for one image.

        Raises:
            InvalidImageUrl:    image pre-check enabled and the URL is not an image.
            ExternalCallFailed: the vision call itself failed.
        Everything downstream of vision degrades instead of raising.
        """
        logger.info("Processing comprehensive analysis for image URL: %s", image_url)

        if self._validate_images:
            await validate_image_url(image_url)

        product = await self.identify_product(image_url)
        query = build_search_query(product)
        logger.info("Search query: %s", query)

        search = await self._orchestrator.search_with_attempts(query, product)
        results = search.results
        logger.info("Found %d search results", len(results))

        top = results[:self._top_results]
        batch = await self._scraper.scrape(top, self._max_pages)

        context = build_context_block(
            batch.pages,
            top,
            max_results=self._context_max_results,
            max_content=self._context_max_content,
            max_snippet=self._context_max_snippet,
        )

        try:
            raw = await self._synthesise(product, context)
        except ExternalCallFailed as exc:
            logger.error("Synthesis call failed: %s", exc)
            return PartialFailure(product, query, top, "synthesis_call_failed", str(exc))

        try:
            payload = extract_json(raw)
        except NoJsonFound as exc:
            logger.warning("Synthesis reply contained no JSON: %r", raw[:300])
            return PartialFailure(product, query, top, "no_json", str(exc))
        except MalformedJson as exc:
            logger.warning("Synthesis reply was not valid JSON: %s", exc.detail)
            return PartialFailure(product, query, top, "malformed_json", exc.detail)

        missing = missing_report_fields(payload)
        if missing:
            logger.warning("Synthesis reply is missing report fields: %s", ", ".join(missing))
            return PartialFailure(
                product, query, top, "schema_mismatch", "missing: " + ", ".join(missing)
            )

        return AnalysisReport(
            payload=payload,
            debug=self._debug_block(query, results, batch.pages, search.attempts),
        )

    async def identify_product(self, image_url: str) -> ProductAttributes:
        """Vision call → attributes. Unusable JSON degrades to empty attributes."""
        try:
            reply = await self._vision.analyse_image(image_url)
        except Exception as exc:
            raise ExternalCallFailed("vision", exc) from exc

        data = try_extract_json(reply.text, default=None, source="vision")
        if not isinstance(data, dict):
            logger.warning("Vision reply unusable — continuing with empty product attributes")
            return ProductAttributes.empty()

        product = ProductAttributes.from_dict(data)
        logger.info("Product data extracted: %s", product.to_dict())
        return product

    async def _synthesise(self, product: ProductAttributes, context: str) -> str:
        messages = [
            {"role": "system", "content": SYNTHESIS_SYSTEM_PROMPT},
            {"role": "user", "content": build_synthesis_user_prompt(product.to_dict(), context)},
        ]
        try:
            result = await self._synthesis.complete(
                messages,
                temperature=self._synthesis_temperature,
                max_tokens=self._synthesis_max_tokens,
            )
        except Exception as exc:
            raise ExternalCallFailed("synthesis", exc) from exc
        logger.info(
            "[%s] synthesis OK — cost=%s latency=%dms",
            result.provider_name, result.cost_str, result.latency_ms,
        )
        return result.text

    @staticmethod
    def _debug_block(
        query: str,
        results: list[SearchResult],
        pages: list[ScrapedPage],
        attempts: list[SearchAttempt],
    ) -> dict:
        return {
            "searchQuery":        query,
            "searchResultsCount": len(results),
            "scrapedPagesCount":  len(pages),
            "searchAttempts":     [a.to_dict() for a in attempts],
        }


def build_pipeline(provider: LLMProvider, orchestrator: SearchOrchestrator) -> AnalysisPipeline:
    """Wire a pipeline from config. The same provider serves vision and synthesis."""
    scraper = PageScraper(
        timeout=config.SCRAPE_TIMEOUT,
        max_chars=config.SCRAPE_MAX_CHARS,
        request_delay=config.SCRAPE_DELAY,
    )
    return AnalysisPipeline(
        vision=provider,
        synthesis=provider,
        orchestrator=orchestrator,
        scraper=scraper,
        top_results=config.TOP_RESULTS,
        max_pages=config.SCRAPE_MAX_PAGES,
        context_max_results=config.CONTEXT_MAX_RESULTS,
        context_max_content=config.CONTEXT_MAX_CONTENT,
        context_max_snippet=config.CONTEXT_MAX_SNIPPET,
        synthesis_temperature=config.SYNTHESIS_TEMPERATURE,
        synthesis_max_tokens=config.SYNTHESIS_MAX_TOKENS,
        validate_images=config.VALIDATE_IMAGE_URL,
    )


def build_orchestrator(backend) -> SearchOrchestrator:
    return SearchOrchestrator(
        backend,
        result_count=config.SEARCH_RESULT_COUNT,
        call_timeout=config.SEARCH_TIMEOUT,
        fallback_delay=config.SEARCH_FALLBACK_DELAY,
    )
