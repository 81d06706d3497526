"""Shared fixtures: async mode, fake clocks and an in-memory mock backend."""

import asyncio
import random

import pytest

from client.mock import MockBackend
from schemas import Audience, Business


def pytest_configure(config):
    """Configure pytest-asyncio to use auto mode."""
    config.option.asyncio_mode = "auto"


class FakeSleep:
    """Stand-in for ``asyncio.sleep`` that records delays and only yields to the loop."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def business() -> Business:
    return Business(
        business_type_id="1",
        name="Roofing Services",
        description="Residential and commercial roofing installation, repair, and maintenance services",
        industry_category="Construction & Home Services",
    )


@pytest.fixture
def audience() -> Audience:
    return Audience(
        audience_id="1",
        name="Homeowners",
        description="Residential property owners aged 25-65 interested in home improvement and maintenance",
    )


@pytest.fixture
async def mock_backend():
    backend = MockBackend(database_url="sqlite+aiosqlite://", latency=0.0, rng=random.Random(7))
    yield backend
    await backend.close()


@pytest.fixture
async def funded_backend(mock_backend):
    """Mock backend with a registered, logged-in user holding 50 credits."""
    await mock_backend.register("ada@example.com", "secret")
    purchase = await mock_backend.initiate_purchase("professional")
    await mock_backend.complete_purchase(purchase["transaction_id"])
    return mock_backend
