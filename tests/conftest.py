"""
Shared fixtures for the test suite.

The API runs against an in-memory SQLite database; the quote provider
and the language model are replaced with in-process fakes so no test
touches the network.
"""

import json
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-with-enough-length-for-hs256"

from collections.abc import Iterator  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tradejournal.domain.journal.entities import Candle, StockQuote  # noqa: E402
from tradejournal.domain.journal.ports import InsightModelPort, QuoteProviderPort  # noqa: E402
from tradejournal.infrastructure.database import build_engine, init_db  # noqa: E402
from tradejournal.infrastructure.journal.cache import TTLCache  # noqa: E402
from tradejournal.interfaces.journal.dependencies import (  # noqa: E402
    get_db_session,
    get_insight_model,
    get_insights_cache,
    get_quote_provider,
    get_stats_cache,
)
from tradejournal.main import app  # noqa: E402

PASSWORD = "Secret123"


class FakeQuoteProvider(QuoteProviderPort):
    """Serves fixed prices for known symbols and a rising daily series."""

    def __init__(self, prices: Optional[dict[str, float]] = None) -> None:
        self.prices = prices if prices is not None else {"RELIANCE.NS": 2500.0, "TCS.NS": 3500.0}
        self.requested: list[str] = []

    def get_quote(self, symbol: str) -> Optional[StockQuote]:
        self.requested.append(symbol)
        price = self.prices.get(symbol)
        if price is None:
            return None
        return StockQuote(
            symbol=symbol,
            price=price,
            change=price * 0.01,
            change_percent=1.0,
            open=price,
            high=price,
            low=price,
            previous_close=price * 0.99,
            timestamp=1_700_000_000_000,
        )

    def get_chart(self, symbol: str, range_: str, interval: str) -> list[Candle]:
        if symbol not in self.prices:
            return []
        base = self.prices[symbol]
        return [
            Candle(
                time=1_700_000_000 + i * 86_400,
                open=base + i,
                high=base + i + 5,
                low=base + i - 5,
                close=base + i + (2 if i % 3 else -1),
                volume=1000 + i,
            )
            for i in range(30)
        ]


MODEL_ANSWER = {
    "tradingPsychology": {"summary": "You trade best when calm.", "details": ["d1"]},
    "recommendations": {"summary": "Keep following your setup.", "topTips": ["Tip A"]},
}


class FakeInsightModel(InsightModelPort):
    """Answers every prompt with a fixed JSON document in a markdown fence."""

    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []

    def generate(self, variables: dict[str, str]) -> str:
        self.calls.append(variables)
        return "```json\n" + json.dumps(MODEL_ANSWER) + "\n```"


@pytest.fixture()
def session_factory() -> Iterator[sessionmaker]:
    """A fresh in-memory database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture()
def quote_provider() -> FakeQuoteProvider:
    return FakeQuoteProvider()


@pytest.fixture()
def insight_model() -> FakeInsightModel:
    return FakeInsightModel()


@pytest.fixture()
def client(
    session_factory: sessionmaker,
    quote_provider: FakeQuoteProvider,
    insight_model: FakeInsightModel,
) -> Iterator[TestClient]:
    """Test client wired to the per-test database and the fakes."""

    def _session() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    insights_cache = TTLCache(300)
    stats_cache = TTLCache(60)
    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_quote_provider] = lambda: quote_provider
    app.dependency_overrides[get_insight_model] = lambda: insight_model
    app.dependency_overrides[get_insights_cache] = lambda: insights_cache
    app.dependency_overrides[get_stats_cache] = lambda: stats_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client: TestClient, email: str = "trader@example.com") -> dict[str, str]:
    """Sign up and sign in; return the Authorization header."""
    client.post(
        "/api/v1/auth/signup",
        json={"name": "Trader", "email": email, "password": PASSWORD},
    )
    response = client.post(
        "/api/v1/auth/signin", json={"email": email, "password": PASSWORD}
    )
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client: TestClient) -> dict[str, str]:
    return register(client)


@pytest.fixture()
def register_user(client: TestClient):
    """Factory for additional signed-in users."""
    return lambda email: register(client, email)
