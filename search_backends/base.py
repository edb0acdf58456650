"""
Abstract base for all web search backends.
Every backend must return the same SearchResult list — the pipeline
doesn't care which backend is active.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    title: str
    link: str       # result URL
    snippet: str

    def to_dict(self) -> dict:
        return {"title": self.title, "link": self.link, "snippet": self.snippet}


class SearchBackend(ABC):
    """All backends must implement this interface."""

    @abstractmethod
    async def search(self, query: str, count: int) -> list[SearchResult]:
        """
        Run a web search for `query`.
        Returns up to `count` results in provider order.
        Raises RuntimeError on a non-success HTTP status.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name for logs/display."""
        ...
