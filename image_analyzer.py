"""
image_analyzer.py — canonical home of ProductAttributes.

The vision call itself lives in providers/ (LLMProvider.analyse_image);
this module turns its parsed JSON into an immutable attributes object and
optionally pre-checks that an image URL really points at an image.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

logger = logging.getLogger(__name__)

CONFIDENCE_LEVELS = ("high", "medium", "low")

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class InvalidImageUrl(ValueError):
    """The image URL is unreachable or does not serve an image."""


def _clean(value: Any) -> Optional[str]:
    """Coerce a scalar JSON value to a stripped string; empty → None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ProductAttributes:
    """Product identification extracted from the package photo."""
    product_name: Optional[str] = None
    brand: Optional[str] = None
    net_weight: Optional[str] = None
    barcode: Optional[str] = None
    visible_text: tuple[str, ...] = ()
    confidence: str = "low"       # high | medium | low

    @classmethod
    def empty(cls) -> "ProductAttributes":
        """All-null attributes used when the vision reply is unusable."""
        return cls()

    @classmethod
    def from_dict(cls, data: Any) -> "ProductAttributes":
        """
        Build attributes from the vision JSON.
        Unknown keys are ignored; anything that is not an object yields empty().
        """
        if not isinstance(data, dict):
            return cls.empty()

        raw_text = data.get("visible_text") or []
        if isinstance(raw_text, str):
            raw_text = [raw_text]
        visible = tuple(t for t in (_clean(v) for v in raw_text) if t) if isinstance(raw_text, list) else ()

        confidence = str(data.get("confidence") or "").strip().lower()
        if confidence not in CONFIDENCE_LEVELS:
            confidence = "low"

        return cls(
            product_name=_clean(data.get("product_name")),
            brand=_clean(data.get("brand")),
            net_weight=_clean(data.get("net_weight")),
            barcode=_clean(data.get("barcode_or_upc", data.get("barcode"))),
            visible_text=visible,
            confidence=confidence,
        )

    def to_dict(self) -> dict:
        """Wire format, same keys the vision prompt asks for."""
        return {
            "product_name":   self.product_name,
            "brand":          self.brand,
            "net_weight":     self.net_weight,
            "barcode_or_upc": self.barcode,
            "visible_text":   list(self.visible_text),
            "confidence":     self.confidence,
        }


async def validate_image_url(image_url: str, timeout: float = 10.0) -> None:
    """
    HEAD the image URL and make sure it serves an image/* content type.
    Raises InvalidImageUrl otherwise.
    """
    try:
        async with aiohttp.ClientSession(headers={"User-Agent": _BROWSER_UA}) as session:
            async with session.head(
                image_url,
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                status = resp.status
                content_type = resp.headers.get("Content-Type", "")
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise InvalidImageUrl(f"Invalid or inaccessible image URL: {exc}") from exc

    if not 200 <= status < 300:
        raise InvalidImageUrl(f"Invalid or inaccessible image URL: HTTP {status}")
    if not content_type.lower().startswith("image/"):
        raise InvalidImageUrl("URL does not point to a valid image")
    logger.info("Image URL validated (%s)", content_type)
