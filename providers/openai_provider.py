"""
OpenAI provider — supports gpt-4o and gpt-4o-mini (both vision capable).

Pricing (as of early 2025):
  gpt-4o:       $5.00 / 1M input tokens,  $15.00 / 1M output tokens
  gpt-4o-mini:  $0.15 / 1M input tokens,  $0.60 / 1M output tokens
Image tiles are billed as input tokens and show up in usage.prompt_tokens.
"""
from __future__ import annotations

import logging
import time

from openai import AsyncOpenAI

from providers.base import CompletionResult, LLMProvider

logger = logging.getLogger(__name__)

# Pricing per 1k tokens
_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4o":      (0.005,   0.015),
    "gpt-4o-mini": (0.00015, 0.0006),
}


class OpenAIProvider(LLMProvider):

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        vision_max_tokens: int = 1000,
    ):
        self.name = "openai"
        self.model_id = model
        self.vision_max_tokens = vision_max_tokens
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.cost_per_1k_input_tokens, self.cost_per_1k_output_tokens = _PRICING.get(
            model, (0.005, 0.015)
        )

    async def complete(self, messages: list[dict], **options) -> CompletionResult:
        params = {"temperature": 0.1, "max_tokens": 1000}
        params.update(options)
        t0 = time.monotonic()

        response = await self._client.chat.completions.create(
            model=self.model_id,
            messages=messages,
            **params,
        )

        latency_ms = int((time.monotonic() - t0) * 1000)
        raw = response.choices[0].message.content or ""
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0

        return CompletionResult(
            provider_name=self.full_name,
            model_id=self.model_id,
            text=raw,
            latency_ms=latency_ms,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )
