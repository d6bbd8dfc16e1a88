"""Pytest fixtures shared by all wage engine tests."""

from __future__ import annotations

import pytest

from wage_engine.config import Settings

# In-memory SQLite shared by every connection of a test's engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    """Settings with the production defaults, independent of the environment."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        default_hours_per_week=40,
        default_shift_hours=8,
        min_hourly_cents=200,
        max_hourly_cents=20000,
        min_sample_size=3,
        k_mad=6,
        statistics_cache_ttl=900,
        debug=False,
    )
