"""Unit tests for the shared aiohttp client."""

import pytest

from reposync.main.aiohttp_client import AioHttpClient


@pytest.fixture
async def http_client():
    """Fixture providing configured AioHttpClient with proper cleanup."""
    client = AioHttpClient()
    client.start()
    yield client
    await client.stop()


async def test_aiohttp_client_uses_configured_timeout(http_client, test_settings):
    assert http_client.session.timeout.total == test_settings.http_timeout_seconds


async def test_aiohttp_client_dns_caching(http_client):
    assert http_client.session.connector.use_dns_cache is True


async def test_aiohttp_client_has_trace_config(http_client):
    trace = http_client.session._trace_configs[0]

    assert len(trace.on_request_start) == 1
    assert len(trace.on_request_end) == 1


async def test_call_returns_session(http_client):
    assert http_client() is http_client.session


async def test_stop_is_idempotent():
    client = AioHttpClient()
    client.start()

    await client.stop()
    await client.stop()

    assert client.session is None
