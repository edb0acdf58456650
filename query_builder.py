"""
Derive the web search query from whatever the vision step identified.
"""
from __future__ import annotations

from image_analyzer import ProductAttributes

QUERY_PREFIX = "nutrition facts, ingredients for "

# How many visible-text tokens to use when nothing better is known
_VISIBLE_TEXT_TOKENS = 4


def build_search_query(attrs: ProductAttributes) -> str:
    """
    First non-empty of: "brand product_name", barcode, first visible-text
    tokens. Always prefixed, so the result is never empty.
    """
    base = " ".join(p for p in (attrs.brand, attrs.product_name) if p).strip()
    if not base and attrs.barcode:
        base = attrs.barcode
    if not base:
        base = " ".join(attrs.visible_text[:_VISIBLE_TEXT_TOKENS]).strip()
    return (QUERY_PREFIX + base).strip()
