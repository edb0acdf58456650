"""
Shared types and base class for all LLM providers.

One provider instance serves both roles the pipeline needs:
  • vision    — analyse_image(image_url): read the package photo
  • synthesis — complete(messages, ...):  merge web content into the report
Both return a CompletionResult; callers only rely on .text.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from prompts import VISION_PROMPT

logger = logging.getLogger(__name__)


# ── Shared result type ─────────────────────────────────────────────────────────

@dataclass
class CompletionResult:
    """Raw reply from a single chat completion call."""
    provider_name: str          # e.g. "openai/gpt-4o-mini"
    model_id: str
    text: str
    latency_ms: int             # wall-clock time for this call
    input_tokens: int
    output_tokens: int
    cost_usd: float             # estimated cost

    @property
    def cost_str(self) -> str:
        if self.cost_usd < 0.001:
            return f"${self.cost_usd * 1000:.3f}m"   # show in milli-dollars
        return f"${self.cost_usd:.4f}"


def vision_messages(image_url: str, prompt: str = VISION_PROMPT) -> list[dict]:
    """OpenAI-style chat messages asking the model to read a product photo."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image_url}},
            ],
        }
    ]


# ── Abstract base ──────────────────────────────────────────────────────────────

class LLMProvider(ABC):
    """Base class all LLM providers must implement."""

    name: str           # e.g. "openai"
    model_id: str       # e.g. "gpt-4o-mini"
    cost_per_1k_input_tokens: float
    cost_per_1k_output_tokens: float
    vision_max_tokens: int = 1000

    @abstractmethod
    async def complete(self, messages: list[dict], **options) -> CompletionResult:
        """
        Run one chat completion.
        `options` are passed through to the API (temperature, max_tokens, ...).
        Raises whatever the SDK raises on transport/API errors.
        """
        ...

    async def analyse_image(self, image_url: str) -> CompletionResult:
        """Vision call: ask the model to identify the product in `image_url`."""
        result = await self.complete(
            vision_messages(image_url),
            temperature=0.1,
            max_tokens=self.vision_max_tokens,
        )
        logger.info(
            "[%s] vision OK — cost=%s latency=%dms",
            self.full_name, result.cost_str, result.latency_ms,
        )
        return result

    @property
    def full_name(self) -> str:
        return f"{self.name}/{self.model_id}"

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            input_tokens / 1000 * self.cost_per_1k_input_tokens
            + output_tokens / 1000 * self.cost_per_1k_output_tokens
        )
