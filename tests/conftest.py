"""Pytest configuration shared by every test package.

The application reads its configuration when :mod:`fightpulse.main` is first
imported, so the environment is pinned here before any test module imports it.
"""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("USE_SQLITE", "1")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("CORS_ALLOW_ORIGINS", "http://localhost:3000")


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Drop cached settings so monkeypatched environment variables take effect."""

    from fightpulse.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
