"""
Best-effort recovery of a JSON object embedded in free-form LLM text.

The whole span from the first "{" to the last "}" is parsed in one go.
Prose before or after the payload is tolerated; an unrelated brace that
appears after the payload's closing brace breaks the parse. Braces are not
balanced.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from errors import MalformedJson, NoJsonFound

logger = logging.getLogger(__name__)


def extract_json(text: Optional[str]) -> Any:
    """
    Return the value parsed from the greedy {...} span of `text`.

    Raises:
        NoJsonFound:   no "{" ... "}" span exists.
        MalformedJson: the span is not valid JSON (decoder message in .detail).
    """
    if not text:
        raise NoJsonFound()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise NoJsonFound()
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedJson(str(exc)) from exc


def try_extract_json(text: Optional[str], default: Any = None, source: str = "text") -> Any:
    """Like extract_json() but logs and returns `default` instead of raising."""
    try:
        return extract_json(text)
    except NoJsonFound:
        logger.warning("[%s] No JSON object found: %r", source, (text or "")[:200])
    except MalformedJson as exc:
        logger.warning("[%s] Failed to parse JSON: %s", source, exc.detail)
    return default
