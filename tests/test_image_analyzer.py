"""
Tests for image_analyzer.py.

Covers:
  - ProductAttributes.from_dict: field mapping, coercion, defaults, bad input
  - ProductAttributes.to_dict: wire keys
  - immutability
  - validate_image_url: image content type, non-image, HTTP error, network error
"""
from __future__ import annotations

import dataclasses
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from image_analyzer import InvalidImageUrl, ProductAttributes, validate_image_url


class TestFromDict:
    def test_full_vision_reply(self):
        attrs = ProductAttributes.from_dict({
            "product_name": "Protein Bar",
            "brand": "Acme",
            "net_weight": "60 g",
            "barcode_or_upc": "012345678905",
            "visible_text": ["PROTEIN", "20g"],
            "confidence": "high",
        })
        assert attrs.product_name == "Protein Bar"
        assert attrs.brand == "Acme"
        assert attrs.net_weight == "60 g"
        assert attrs.barcode == "012345678905"
        assert attrs.visible_text == ("PROTEIN", "20g")
        assert attrs.confidence == "high"

    def test_missing_confidence_defaults_low(self):
        attrs = ProductAttributes.from_dict({"brand": "Acme"})
        assert attrs.confidence == "low"

    def test_unknown_confidence_defaults_low(self):
        attrs = ProductAttributes.from_dict({"confidence": "very sure"})
        assert attrs.confidence == "low"

    def test_confidence_is_case_insensitive(self):
        assert ProductAttributes.from_dict({"confidence": "Medium"}).confidence == "medium"

    def test_barcode_alias(self):
        assert ProductAttributes.from_dict({"barcode": "42"}).barcode == "42"

    def test_numeric_barcode_coerced_to_string(self):
        assert ProductAttributes.from_dict({"barcode_or_upc": 12345}).barcode == "12345"

    def test_blank_strings_become_none(self):
        attrs = ProductAttributes.from_dict({"brand": "  ", "product_name": ""})
        assert attrs.brand is None
        assert attrs.product_name is None

    def test_values_are_stripped(self):
        assert ProductAttributes.from_dict({"brand": "  Acme "}).brand == "Acme"

    def test_visible_text_string_wrapped(self):
        assert ProductAttributes.from_dict({"visible_text": "HIGH PROTEIN"}).visible_text == ("HIGH PROTEIN",)

    def test_visible_text_drops_empty_entries(self):
        attrs = ProductAttributes.from_dict({"visible_text": ["A", "", None, " B "]})
        assert attrs.visible_text == ("A", "B")

    def test_non_dict_gives_empty(self):
        assert ProductAttributes.from_dict(["not", "a", "dict"]) == ProductAttributes.empty()

    def test_none_gives_empty(self):
        assert ProductAttributes.from_dict(None) == ProductAttributes.empty()


class TestEmptyAndWire:
    def test_empty_is_all_null(self):
        attrs = ProductAttributes.empty()
        assert attrs.product_name is None
        assert attrs.brand is None
        assert attrs.barcode is None
        assert attrs.visible_text == ()
        assert attrs.confidence == "low"

    def test_to_dict_uses_wire_keys(self):
        wire = ProductAttributes(brand="Acme", barcode="1", visible_text=("x",)).to_dict()
        assert wire == {
            "product_name": None,
            "brand": "Acme",
            "net_weight": None,
            "barcode_or_upc": "1",
            "visible_text": ["x"],
            "confidence": "low",
        }

    def test_frozen(self):
        attrs = ProductAttributes(brand="Acme")
        with pytest.raises(dataclasses.FrozenInstanceError):
            attrs.brand = "Other"  # type: ignore[misc]


# ── validate_image_url ────────────────────────────────────────────────────────

def _session_with_head(status: int = 200, content_type: str = "image/jpeg", exc=None):
    mock_resp = MagicMock()
    mock_resp.status = status
    mock_resp.headers = {"Content-Type": content_type}
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)

    mock_session = MagicMock()
    if exc is not None:
        mock_session.head = MagicMock(side_effect=exc)
    else:
        mock_session.head = MagicMock(return_value=mock_resp)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    return mock_session


@pytest.mark.asyncio
class TestValidateImageUrl:
    async def test_image_content_type_passes(self):
        session = _session_with_head(content_type="image/png")
        with patch("image_analyzer.aiohttp.ClientSession", return_value=session):
            await validate_image_url("https://cdn.example.com/bar.png")

    async def test_html_content_type_rejected(self):
        session = _session_with_head(content_type="text/html; charset=utf-8")
        with patch("image_analyzer.aiohttp.ClientSession", return_value=session):
            with pytest.raises(InvalidImageUrl, match="valid image"):
                await validate_image_url("https://example.com/page")

    async def test_http_error_rejected(self):
        session = _session_with_head(status=404)
        with patch("image_analyzer.aiohttp.ClientSession", return_value=session):
            with pytest.raises(InvalidImageUrl, match="404"):
                await validate_image_url("https://example.com/missing.jpg")

    async def test_network_error_rejected(self):
        session = _session_with_head(exc=aiohttp.ClientConnectionError("refused"))
        with patch("image_analyzer.aiohttp.ClientSession", return_value=session):
            with pytest.raises(InvalidImageUrl, match="inaccessible"):
                await validate_image_url("https://down.example.com/a.jpg")
