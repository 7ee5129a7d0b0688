"""
Shared test fixtures for the episode-fetcher test suite.

Provides a real HttpTransport on a small thread pool (HTTP itself is
mocked per test with respx) and keeps structlog output out of the way.
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest
import structlog

from episode_fetcher.adapters.http_transport import HttpTransport

BASE_URL = "http://episodes.example.com"


@pytest.fixture(autouse=True)
def _quiet_structlog() -> Iterator[None]:
    """Render log events to return values instead of stdout during tests."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture()
def base_url() -> str:
    return BASE_URL


@pytest.fixture()
def http_transport() -> Iterator[HttpTransport]:
    """HttpTransport with its own client and a two-worker pool, closed after the test."""
    transport = HttpTransport(
        client=httpx.Client(timeout=5),
        executor=ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-transport"),
    )
    yield transport
    transport.close()
