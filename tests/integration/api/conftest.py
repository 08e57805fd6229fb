"""Integration test fixtures for the health API."""
from __future__ import annotations

import pytest
from httpx import AsyncClient, ASGITransport

from processor.src.adapters.inbound.health_app import ReadinessState, create_health_app
from processor.src.infrastructure.observability import WorkerMetrics


@pytest.fixture
def readiness():
    return ReadinessState()


@pytest.fixture
def metrics():
    return WorkerMetrics()


@pytest.fixture
async def async_client(readiness, metrics):
    """Create an async test client for the health app."""
    app = create_health_app(readiness, metrics)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
