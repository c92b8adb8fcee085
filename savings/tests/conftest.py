"""Shared fixtures: in-memory ledger, stubbed quote providers, test client."""

import os

# Settings are read at import time; pin them before anything from savings loads.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SYNC_PASSWORD"] = "test-secret"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["LOG_TO_FILE"] = "false"

from typing import Any, Callable, Dict, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from savings.api.deps import get_db, get_quote_gateway
from savings.main import create_app
from savings.models import DEFAULT_ASSETS, Asset, Base
from savings.services.quote_service import QuoteGateway

SYNC_PASSWORD = "test-secret"
RATES_URL = "https://rates.test/v4/latest/USD"
PRICES_URL = "https://prices.test/api/v3/simple/price"
PRICE_IDS = {"BTC": "bitcoin", "GOLD": "tether-gold"}


def make_record(**overrides: Any) -> Dict[str, Any]:
    """One sheet row in the wire format the sync script posts."""
    record = {
        "date": "2024-01-15",
        "amount": 0.01,
        "asset": "BTC",
        "thb_price": 1_500_000,
        "usd_value": 420.0,
        "usd_cum": 420.0,
        "reason": "monthly DCA",
        "status": "paid",
        "usdthb_rate": 35.5,
    }
    record.update(overrides)
    return record


def quote_handler(
    rate: Any = 35.0,
    prices: Optional[Dict[str, Any]] = None,
    fail_rates: bool = False,
    fail_prices: bool = False,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler answering like the real providers."""
    prices = {"bitcoin": {"usd": 60000.0}, "tether-gold": {"usd": 2000.0}} if prices is None else prices

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "rates.test":
            if fail_rates:
                return httpx.Response(503, json={"error": "down"})
            return httpx.Response(200, json={"base": "USD", "rates": {"THB": rate}})
        if request.url.host == "prices.test":
            if fail_prices:
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(200, json=prices)
        return httpx.Response(404)

    return handler


def make_gateway(handler: Callable[[httpx.Request], httpx.Response]) -> QuoteGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return QuoteGateway(
        client,
        exchange_rate_url=RATES_URL,
        price_api_url=PRICES_URL,
        price_ids=PRICE_IDS,
        fallback_rate=33.5,
        timeout=2.0,
    )


@pytest.fixture
def engine():
    """Fresh in-memory SQLite ledger with the default asset catalog."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(Asset.__table__.insert(), DEFAULT_ASSETS)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def quote_gateway():
    return make_gateway(quote_handler())


@pytest.fixture
def app(session_factory, quote_gateway):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_quote_gateway] = lambda: quote_gateway
    return app


@pytest.fixture
def client(app):
    """Test client without lifespan (no migrations, no real HTTP client)."""
    return TestClient(app)
