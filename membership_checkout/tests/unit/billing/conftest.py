from typing import AsyncGenerator

import pytest

from membership_checkout.src.billing.shared.config import BillingConfig

from .fakes import FakeStripe, make_settings


@pytest.fixture
def billing_config() -> BillingConfig:
    return BillingConfig.from_settings(make_settings())


@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    return FakeStripe().install(monkeypatch)


@pytest.fixture
def app(fake_stripe):
    from membership_checkout.core.registrar import register_app

    return register_app(make_settings())


@pytest.fixture
async def client(app) -> AsyncGenerator:
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as c:
        yield c
