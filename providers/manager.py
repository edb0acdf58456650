"""
Provider Manager — picks the LLM provider used for both vision and synthesis.

Selection order:
  1. Azure OpenAI   when AZURE_OPENAI_API_KEY + AZURE_OPENAI_ENDPOINT
                    + AZURE_OPENAI_DEPLOYMENT are all set
  2. OpenAI         when OPENAI_API_KEY is set (model from OPENAI_MODEL)

Nothing is cached here: main.py builds the provider once at startup and
hands it to the pipeline.
"""
from __future__ import annotations

import logging

import config
from providers.base import LLMProvider

logger = logging.getLogger(__name__)


def build_provider() -> LLMProvider:
    """Instantiate the configured provider. Raises RuntimeError if none is configured."""
    if config.azure_configured():
        from providers.azure_openai_provider import AzureOpenAIProvider
        provider = AzureOpenAIProvider(
            api_key=config.AZURE_OPENAI_API_KEY,
            endpoint=config.AZURE_OPENAI_ENDPOINT,
            deployment=config.AZURE_OPENAI_DEPLOYMENT,
            api_version=config.AZURE_OPENAI_API_VERSION,
            timeout=config.LLM_TIMEOUT,
            vision_max_tokens=config.VISION_MAX_TOKENS,
        )
    elif config.OPENAI_API_KEY:
        from providers.openai_provider import OpenAIProvider
        provider = OpenAIProvider(
            api_key=config.OPENAI_API_KEY,
            model=config.OPENAI_MODEL,
            timeout=config.LLM_TIMEOUT,
            vision_max_tokens=config.VISION_MAX_TOKENS,
        )
    else:
        raise RuntimeError(
            "No LLM provider available.\n"
            "Set OPENAI_API_KEY, or AZURE_OPENAI_API_KEY + AZURE_OPENAI_ENDPOINT "
            "+ AZURE_OPENAI_DEPLOYMENT in .env"
        )

    logger.info("Loaded provider: %s", provider.full_name)
    return provider
