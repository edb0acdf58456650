"""
Central configuration — reads from .env file.

Every setting is a module attribute so code can simply read config.X.
Tests override values with monkeypatch.setattr(config, "X", ...).

At least one LLM backend (OpenAI or Azure OpenAI) must be configured;
main.py refuses to start otherwise (see missing_required_settings()).
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "true" if default else "false")
    return raw.strip().lower() in ("true", "1", "yes")


def _env_str(name: str) -> str | None:
    return (os.getenv(name) or "").strip() or None


# ── HTTP server ───────────────────────────────────────────────────────────────
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "3000"))

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str       = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE: str | None = _env_str("LOG_FILE")

# ── LLM (vision + synthesis) ──────────────────────────────────────────────────
# Azure OpenAI is used when key + endpoint + deployment are all present,
# otherwise the direct OpenAI API.
OPENAI_API_KEY: str | None = _env_str("OPENAI_API_KEY")
OPENAI_MODEL: str          = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

AZURE_OPENAI_API_KEY: str | None    = _env_str("AZURE_OPENAI_API_KEY")
AZURE_OPENAI_ENDPOINT: str | None   = _env_str("AZURE_OPENAI_ENDPOINT")
AZURE_OPENAI_DEPLOYMENT: str | None = _env_str("AZURE_OPENAI_DEPLOYMENT")
AZURE_OPENAI_API_VERSION: str       = os.getenv("AZURE_OPENAI_API_VERSION", "2024-12-01-preview")

# Seconds before the SDK gives up on a single completion call
LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))

VISION_MAX_TOKENS: int       = int(os.getenv("VISION_MAX_TOKENS", "1000"))
SYNTHESIS_TEMPERATURE: float = float(os.getenv("SYNTHESIS_TEMPERATURE", "0.1"))
SYNTHESIS_MAX_TOKENS: int    = int(os.getenv("SYNTHESIS_MAX_TOKENS", "1500"))

# ── Web search ────────────────────────────────────────────────────────────────
# auto   → Brave if BRAVE_API_KEY is set, otherwise Google Custom Search
# brave  → Brave Search API
# google → Google Custom Search JSON API (needs key + engine id)
SEARCH_BACKEND: str = os.getenv("SEARCH_BACKEND", "auto")

BRAVE_API_KEY: str | None           = _env_str("BRAVE_API_KEY")
GOOGLE_SEARCH_API_KEY: str | None   = _env_str("GOOGLE_SEARCH_API_KEY")
GOOGLE_SEARCH_ENGINE_ID: str | None = _env_str("GOOGLE_SEARCH_ENGINE_ID")

SEARCH_RESULT_COUNT: int     = int(os.getenv("SEARCH_RESULT_COUNT", "8"))
SEARCH_TIMEOUT: float        = float(os.getenv("SEARCH_TIMEOUT", "15"))
# Fixed pause before each fallback search attempt
SEARCH_FALLBACK_DELAY: float = float(os.getenv("SEARCH_FALLBACK_DELAY", "0.4"))

# ── Page scraping ─────────────────────────────────────────────────────────────
TOP_RESULTS: int        = int(os.getenv("TOP_RESULTS", "6"))
SCRAPE_MAX_PAGES: int   = int(os.getenv("SCRAPE_MAX_PAGES", "5"))
SCRAPE_TIMEOUT: float   = float(os.getenv("SCRAPE_TIMEOUT", "10"))
SCRAPE_DELAY: float     = float(os.getenv("SCRAPE_DELAY", "0.5"))
SCRAPE_MAX_CHARS: int   = int(os.getenv("SCRAPE_MAX_CHARS", "3000"))

# ── Synthesis prompt context ──────────────────────────────────────────────────
CONTEXT_MAX_RESULTS: int = int(os.getenv("CONTEXT_MAX_RESULTS", "5"))
CONTEXT_MAX_CONTENT: int = int(os.getenv("CONTEXT_MAX_CONTENT", "2000"))
CONTEXT_MAX_SNIPPET: int = int(os.getenv("CONTEXT_MAX_SNIPPET", "300"))

# HEAD-check the image URL (content-type must be image/*) before calling vision
VALIDATE_IMAGE_URL: bool = _env_bool("VALIDATE_IMAGE_URL", False)


def azure_configured() -> bool:
    return bool(AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_DEPLOYMENT)


def search_configured() -> bool:
    return bool(BRAVE_API_KEY or (GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID))


def missing_required_settings() -> list[str]:
    """
    Return a human-readable line for every setting the service cannot run without.
    An empty list means the configuration is usable.
    """
    problems: list[str] = []
    if not (OPENAI_API_KEY or azure_configured()):
        problems.append(
            "OPENAI_API_KEY (or AZURE_OPENAI_API_KEY + AZURE_OPENAI_ENDPOINT "
            "+ AZURE_OPENAI_DEPLOYMENT)"
        )
    return problems
