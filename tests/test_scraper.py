"""
Tests for scraper.py.

Covers:
  - extract_text_from_html: script/style removal, tags, entities, whitespace
  - PageScraper.fetch_pages: max_pages bound, input order, skipping failed
    and non-2xx pages, empty pages, content cap, throttling delay
  - PageScraper.scrape: failures collected with reasons
"""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, call, patch

import aiohttp
import pytest

from scraper import PageScraper, ScrapedPage, extract_text_from_html
from search_backends.base import SearchResult


# ── extract_text_from_html ────────────────────────────────────────────────────

class TestExtractTextFromHtml:
    def test_strips_tags(self):
        assert extract_text_from_html("<p>Protein <b>20g</b></p>") == "Protein 20g"

    def test_removes_script_and_style_blocks(self):
        html = (
            "<html><head><style type='text/css'>body {color: red}</style>"
            "<script>var x = '<p>not text</p>';</script></head>"
            "<body>Calories 200</body></html>"
        )
        assert extract_text_from_html(html) == "Calories 200"

    def test_script_removal_is_case_insensitive(self):
        assert extract_text_from_html("<SCRIPT>alert(1)</SCRIPT>Sugar 5g") == "Sugar 5g"

    def test_decodes_common_entities(self):
        html = "Fat&nbsp;9g &amp; Salt &lt;1g &gt;0 &quot;low&quot; it&#39;s"
        assert extract_text_from_html(html) == "Fat 9g & Salt <1g >0 \"low\" it's"

    def test_collapses_whitespace(self):
        assert extract_text_from_html("  a\n\n\t b   c  ") == "a b c"

    def test_tags_become_word_breaks(self):
        assert extract_text_from_html("<td>Fiber</td><td>3g</td>") == "Fiber 3g"

    def test_empty_input(self):
        assert extract_text_from_html("") == ""

    def test_markup_only_gives_empty(self):
        assert extract_text_from_html("<div><script>x()</script></div>") == ""


# ── PageScraper ───────────────────────────────────────────────────────────────

def make_results(n: int) -> list[SearchResult]:
    return [SearchResult(f"Page {i}", f"https://site{i}.com/p", f"snippet {i}") for i in range(n)]


def _fake_response(status: int, html: str, enter_exc: Exception | None = None):
    resp = MagicMock()
    resp.status = status
    resp.text = AsyncMock(return_value=html)
    if enter_exc is not None:
        resp.__aenter__ = AsyncMock(side_effect=enter_exc)
    else:
        resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def fake_session(pages: dict):
    """
    pages maps url → (status, html) or an exception instance raised by get().
    Unknown URLs answer 200 with a generic page.
    """
    def _get(url, **kwargs):
        entry = pages.get(url, (200, f"<p>content of {url}</p>"))
        if isinstance(entry, BaseException):
            raise entry
        return _fake_response(*entry)

    session = MagicMock()
    session.get = MagicMock(side_effect=_get)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.mark.asyncio
class TestFetchPages:
    async def test_bounded_by_max_pages_in_input_order(self):
        session = fake_session({})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            pages = await PageScraper(request_delay=0).fetch_pages(make_results(6), max_pages=5)

        assert [p.url for p in pages] == [f"https://site{i}.com/p" for i in range(5)]
        assert session.get.call_count == 5

    async def test_page_fields(self):
        session = fake_session({"https://site0.com/p": (200, "<h1>Acme</h1> <p>Protein 20g</p>")})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            pages = await PageScraper(request_delay=0).fetch_pages(make_results(1), max_pages=5)

        assert pages == [ScrapedPage(title="Page 0", url="https://site0.com/p", content="Acme Protein 20g")]

    async def test_skips_exceptions_and_non_success_status(self):
        session = fake_session({
            "https://site1.com/p": aiohttp.ClientConnectionError("refused"),
            "https://site3.com/p": (404, "<p>not found</p>"),
        })
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            pages = await PageScraper(request_delay=0).fetch_pages(make_results(6), max_pages=5)

        assert [p.url for p in pages] == [
            "https://site0.com/p",
            "https://site2.com/p",
            "https://site4.com/p",
        ]

    async def test_timeout_on_enter_is_skipped(self):
        session = fake_session({})
        session.get = MagicMock(side_effect=lambda url, **kw: _fake_response(
            200, "", enter_exc=asyncio.TimeoutError()) if url.startswith("https://site0")
            else _fake_response(200, "<p>ok</p>"))
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            batch = await PageScraper(request_delay=0).scrape(make_results(2), max_pages=5)

        assert [p.url for p in batch.pages] == ["https://site1.com/p"]
        assert batch.failures[0].url == "https://site0.com/p"
        assert "TimeoutError" in batch.failures[0].reason

    async def test_empty_text_is_skipped(self):
        session = fake_session({"https://site0.com/p": (200, "<script>only()</script>")})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            batch = await PageScraper(request_delay=0).scrape(make_results(2), max_pages=5)

        assert [p.url for p in batch.pages] == ["https://site1.com/p"]
        assert batch.failures[0].reason == "empty content"

    async def test_content_capped(self):
        long_html = "<p>" + ("word " * 2000) + "</p>"
        session = fake_session({"https://site0.com/p": (200, long_html)})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            pages = await PageScraper(request_delay=0, max_chars=3000).fetch_pages(make_results(1))

        assert len(pages[0].content) == 3000

    async def test_every_page_within_cap(self):
        session = fake_session({
            f"https://site{i}.com/p": (200, "<p>" + "x" * (1000 * i) + "</p>") for i in range(5)
        })
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            pages = await PageScraper(request_delay=0, max_chars=2500).fetch_pages(make_results(5))

        assert pages
        assert all(len(p.content) <= 2500 for p in pages)

    async def test_failures_collected_with_reasons(self):
        session = fake_session({
            "https://site0.com/p": (503, "busy"),
            "https://site1.com/p": RuntimeError("dns"),
        })
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            batch = await PageScraper(request_delay=0).scrape(make_results(3), max_pages=5)

        assert len(batch.pages) == 1
        assert [(f.url, f.reason) for f in batch.failures] == [
            ("https://site0.com/p", "http 503"),
            ("https://site1.com/p", "RuntimeError: dns"),
        ]

    async def test_missing_link_skipped_without_request(self):
        results = [SearchResult("No link", "", "s")] + make_results(1)
        session = fake_session({})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            batch = await PageScraper(request_delay=0).scrape(results, max_pages=5)

        assert session.get.call_count == 1
        assert batch.failures[0].reason == "missing url"

    async def test_delay_between_requests(self):
        session = fake_session({})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            with patch("scraper.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                await PageScraper(request_delay=0.5).fetch_pages(make_results(3), max_pages=5)

        assert mock_sleep.await_args_list == [call(0.5), call(0.5)]

    async def test_no_results_opens_no_session(self):
        with patch("scraper.aiohttp.ClientSession") as mock_cls:
            assert await PageScraper().fetch_pages([], max_pages=5) == []
        mock_cls.assert_not_called()

    async def test_zero_max_pages(self):
        with patch("scraper.aiohttp.ClientSession") as mock_cls:
            assert await PageScraper().fetch_pages(make_results(3), max_pages=0) == []
        mock_cls.assert_not_called()

    async def test_does_not_mutate_input(self):
        results = make_results(4)
        snapshot = list(results)
        session = fake_session({})
        with patch("scraper.aiohttp.ClientSession", return_value=session):
            await PageScraper(request_delay=0).fetch_pages(results, max_pages=2)
        assert results == snapshot
