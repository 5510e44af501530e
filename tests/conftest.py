"""Shared fixtures for GravixLayer tests."""

from unittest.mock import AsyncMock, patch

import pytest
import respx

from gravixlayer import GravixLayer

BASE_URL = "https://api.gravixlayer.test/v1/inference"


@pytest.fixture
def client():
    """Client pointing at the mocked API with the default retry budget."""
    c = GravixLayer(api_key="test-key", base_url=BASE_URL)
    yield c
    c.close()


@pytest.fixture
def mock_api():
    """Mock every HTTP call made through httpx."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def no_sleep():
    """Record backoff delays instead of sleeping."""
    with patch("time.sleep", return_value=None) as sleep:
        yield sleep


@pytest.fixture
def no_async_sleep():
    """Record async backoff delays instead of sleeping."""
    with patch("gravixlayer._base.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep
