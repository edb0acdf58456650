"""
Exception types shared across the analysis pipeline.

NoJsonFound / MalformedJson are recoverable: callers degrade to default or
partial data. ExternalCallFailed wraps an error raised by a third-party
service (vision, search, synthesis) so the HTTP layer can report which one.
"""
from __future__ import annotations

from typing import Optional


class NoJsonFound(ValueError):
    """The text contains no {...} span at all."""

    def __init__(self, message: str = "No JSON object found in text") -> None:
        super().__init__(message)


class MalformedJson(ValueError):
    """A {...} span was found but it is not valid JSON."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Malformed JSON: {detail}")
        self.detail = detail


class ExternalCallFailed(RuntimeError):
    """A call to an external service raised or returned an error."""

    def __init__(self, service: str, cause: Optional[BaseException] = None) -> None:
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{service} call failed — {reason}")
        self.service = service
        self.cause = cause
