"""
Azure OpenAI provider — GPT-4o / GPT-4o-mini via Microsoft Azure.

Use this instead of the direct OpenAI provider when:
  • You have Azure credits or an enterprise Azure agreement
  • You need data residency (Azure processes data in your selected region)

Setup in Azure Portal:
  1. Create an "Azure OpenAI" resource at portal.azure.com
  2. Deployments → + New deployment → pick "gpt-4o" or "gpt-4o-mini"
       Give your deployment any name, e.g. "gpt-4o-prod"
  3. Keys and Endpoint → copy KEY 1 and the endpoint URL
  4. In .env:
       AZURE_OPENAI_API_KEY     ← KEY 1 value
       AZURE_OPENAI_ENDPOINT    ← https://YOUR-NAME.openai.azure.com/
       AZURE_OPENAI_DEPLOYMENT  ← gpt-4o-prod  (the name you chose in step 2)

Request/response format is identical to OpenAI, so completion handling is
inherited; only the client and the pricing lookup differ.
"""
from __future__ import annotations

import logging

import openai

from providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

# Matches deployment names containing these substrings to cheaper pricing
_MINI_PATTERNS = ("mini", "gpt4o-mini", "gpt-4o-mini")


class AzureOpenAIProvider(OpenAIProvider):
    """One instance = one Azure deployment (model + region)."""

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        deployment: str,
        api_version: str = "2024-12-01-preview",
        timeout: float = 60.0,
        vision_max_tokens: int = 1000,
    ):
        self.name = "azure"
        # Azure uses the deployment name where OpenAI expects the model name
        self.model_id = deployment
        self.vision_max_tokens = vision_max_tokens
        self._client = openai.AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=endpoint.rstrip("/"),
            api_version=api_version,
            timeout=timeout,
        )

        # Cost depends on the underlying model — infer from deployment name
        if any(p in deployment.lower() for p in _MINI_PATTERNS):
            self.cost_per_1k_input_tokens  = 0.00015
            self.cost_per_1k_output_tokens = 0.0006
        else:
            self.cost_per_1k_input_tokens  = 0.005
            self.cost_per_1k_output_tokens = 0.015
