"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across the unit tests.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import httpx
import pytest

from roundtrip_retry.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Metrics are disabled so tests do not depend on the global Prometheus
    registry; tests that check metrics enable them explicitly.
    """
    return Settings(
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        BODY_DRAIN_LIMIT=4096,
        DEFAULT_MAX_ATTEMPTS=3,
        DEFAULT_RETRY_STATUSES=[429, 502, 503, 504],
        HTTP_TIMEOUT=5.0,
        METRICS_ENABLED=False,
    )


@pytest.fixture
def sample_request() -> httpx.Request:
    """GET request shared by all attempts of a test."""
    return httpx.Request("GET", "https://api.example.com/items?page=1")


@pytest.fixture
def fixed_start() -> datetime:
    """Start time returned by the first clock call."""
    return datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def ticking_clock(fixed_start: datetime) -> Mock:
    """Clock that moves forward one second per call.

    Lets tests prove the start time is read once per request: any second
    read would yield a different value.
    """
    ticks = (fixed_start + timedelta(seconds=i) for i in range(10_000))
    return Mock(side_effect=lambda: next(ticks))
