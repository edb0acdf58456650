"""
Shared pytest fixtures.

Settings are module attributes of config.py, so tests override them with
monkeypatch.setattr(config, ...). The autouse fixture below blanks every
credential so a developer's real .env never leaks into a test run.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def clean_credentials(monkeypatch):
    import config
    for name in (
        "OPENAI_API_KEY",
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ENDPOINT",
        "AZURE_OPENAI_DEPLOYMENT",
        "BRAVE_API_KEY",
        "GOOGLE_SEARCH_API_KEY",
        "GOOGLE_SEARCH_ENGINE_ID",
    ):
        monkeypatch.setattr(config, name, None)
    monkeypatch.setattr(config, "SEARCH_BACKEND", "auto")
    yield
