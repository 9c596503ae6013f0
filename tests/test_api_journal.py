"""
Tests for the journal API endpoints.

Runs the FastAPI routes end to end against in-memory SQLite with the
quote provider and language model faked.
Validates request validation, response schemas, and error mapping.
"""

import asyncio
import json
from unittest.mock import MagicMock

from starlette.requests import Request

from tradejournal.shared.security.rate_limiting import (
    rate_limit_exceeded_handler,
    rate_limit_key,
)

API = "/api/v1"

TRADE = {
    "tradeDate": "2024-01-15",
    "script": "reliance",
    "type": "BUY",
    "quantity": 10,
    "buyPrice": 100,
    "sellPrice": 110,
    "charges": 20,
    "mood": "CALM",
    "followSetup": True,
    "remarks": "Breakout",
}


def create_trade(client, headers, **overrides) -> dict:
    response = client.post(f"{API}/intraday", json={**TRADE, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthEndpoints:
    """Tests for /api/v1/auth."""

    def test_signup_and_signin(self, client) -> None:
        """A new account can sign in with a bearer token."""
        response = client.post(
            f"{API}/auth/signup",
            json={"name": "Asha", "email": "Asha@Example.com", "password": "Secret123"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully"
        assert body["user"]["email"] == "asha@example.com"

        response = client.post(
            f"{API}/auth/signin", json={"email": "asha@example.com", "password": "Secret123"}
        )
        assert response.status_code == 200
        session = response.json()
        assert session["token_type"] == "bearer"
        assert session["expires_in"] > 0
        assert session["user"]["name"] == "Asha"

    def test_duplicate_email_rejected(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/auth/signup",
            json={"email": "trader@example.com", "password": "Secret123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "User with this email already exists"

    def test_weak_password_rejected(self, client) -> None:
        """Passwords need eight characters, mixed case and a digit."""
        response = client.post(
            f"{API}/auth/signup", json={"email": "weak@example.com", "password": "password"}
        )
        assert response.status_code == 422

    def test_wrong_password(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/auth/signin", json={"email": "trader@example.com", "password": "Wrong1234"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"


class TestIntradayEndpoints:
    """Tests for /api/v1/intraday."""

    def test_create_derives_pl(self, client, auth_headers) -> None:
        """P&L sent by the client is ignored and recomputed."""
        trade = create_trade(client, auth_headers, profitLoss=99999)
        assert trade["script"] == "RELIANCE"
        assert trade["day"] == "Monday"
        assert trade["points"] == 10
        assert trade["profitLoss"] == 100
        assert trade["netProfitLoss"] == 80

    def test_invalid_trade_rejected(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/intraday", json={**TRADE, "quantity": 0}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_list_is_paginated_newest_first(self, client, auth_headers) -> None:
        create_trade(client, auth_headers, tradeDate="2024-01-15")
        create_trade(client, auth_headers, tradeDate="2024-01-17")
        create_trade(client, auth_headers, tradeDate="2024-01-16")

        response = client.get(f"{API}/intraday?page=1&limit=2", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert [t["tradeDate"] for t in body["data"]] == ["2024-01-17", "2024-01-16"]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

        everything = client.get(f"{API}/intraday?all=true", headers=auth_headers).json()
        assert len(everything["data"]) == 3

    def test_update_and_delete(self, client, auth_headers) -> None:
        trade = create_trade(client, auth_headers)
        response = client.put(
            f"{API}/intraday/{trade['id']}", json={"sellPrice": 90}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["netProfitLoss"] == -120

        response = client.delete(f"{API}/intraday/{trade['id']}", headers=auth_headers)
        assert response.json()["message"] == "Trade deleted successfully"
        response = client.delete(f"{API}/intraday/{trade['id']}", headers=auth_headers)
        assert response.status_code == 404

    def test_other_users_trades_are_invisible(self, client, auth_headers, register_user) -> None:
        trade = create_trade(client, auth_headers)
        intruder = register_user("intruder@example.com")

        assert client.get(f"{API}/intraday", headers=intruder).json()["data"] == []
        response = client.put(
            f"{API}/intraday/{trade['id']}", json={"quantity": 1}, headers=intruder
        )
        assert response.status_code == 404

    def test_import_and_export(self, client, auth_headers) -> None:
        content = (
            "Date,Script,Buy/Sell,Quantity,Entry Price,Exit Price,Mood\n"
            "15/01/2024,TCS,Buy,2,3500,3550,CONFIDENT\n"
            "16/01/2024,INFY,Buy,-1,1500,1490,CALM\n"
        )
        response = client.post(
            f"{API}/intraday/import", json={"content": content}, headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["imported"] == 1
        assert body["failed"] == 1
        assert body["errors"][0].startswith("Row 3:")

        response = client.get(f"{API}/intraday/export?period=all", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert "2024-01-15,TCS,BUY,2" in response.text
        assert "Period,All time" in response.text

    def test_import_without_required_columns(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/intraday/import",
            json={"content": "Date,Notes\n2024-01-01,hi\n"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "Missing required columns" in response.json()["error"]

    def test_exported_file_imports_back(self, client, auth_headers, register_user) -> None:
        """A report downloaded by one account restores the same trades in another."""
        create_trade(client, auth_headers, charges=25)
        exported = client.get(f"{API}/intraday/export?period=all", headers=auth_headers).text

        other = register_user("restore@example.com")
        response = client.post(
            f"{API}/intraday/import", json={"content": exported}, headers=other
        )
        assert response.json() == {"imported": 1, "failed": 0, "errors": []}

        restored = client.get(f"{API}/intraday", headers=other).json()["data"][0]
        assert restored["charges"] == 25
        assert restored["profitLoss"] == 100
        assert restored["netProfitLoss"] == 75


class TestPortfolioEndpoints:
    """Tests for /api/v1/portfolio."""

    def test_add_prices_holding(self, client, auth_headers, quote_provider) -> None:
        response = client.post(
            f"{API}/portfolio",
            json={"symbol": "reliance", "quantity": 10, "buyPrice": 2400},
            headers=auth_headers,
        )
        assert response.status_code == 201
        holding = response.json()
        assert holding["symbol"] == "RELIANCE"
        assert holding["averagePrice"] == 2400
        assert holding["currentPrice"] == 2500
        assert holding["profitLoss"] == 1000
        assert "RELIANCE.NS" in quote_provider.requested

    def test_duplicate_symbol_conflicts(self, client, auth_headers) -> None:
        payload = {"symbol": "TCS", "quantity": 1, "averagePrice": 3000}
        client.post(f"{API}/portfolio", json=payload, headers=auth_headers)
        response = client.post(f"{API}/portfolio", json=payload, headers=auth_headers)
        assert response.status_code == 409

    def test_price_required(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/portfolio", json={"symbol": "TCS", "quantity": 1}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_refresh_prices(self, client, auth_headers, quote_provider) -> None:
        client.post(
            f"{API}/portfolio",
            json={"symbol": "RELIANCE", "quantity": 10, "buyPrice": 2400},
            headers=auth_headers,
        )
        quote_provider.prices["RELIANCE.NS"] = 2600.0

        stale = client.get(f"{API}/portfolio", headers=auth_headers).json()
        assert stale[0]["currentPrice"] == 2500

        fresh = client.get(f"{API}/portfolio?updatePrices=true", headers=auth_headers).json()
        assert fresh[0]["currentPrice"] == 2600
        assert fresh[0]["profitLoss"] == 2000

    def test_update_and_delete(self, client, auth_headers) -> None:
        holding = client.post(
            f"{API}/portfolio",
            json={"symbol": "TCS", "quantity": 1, "averagePrice": 3000},
            headers=auth_headers,
        ).json()
        response = client.put(
            f"{API}/portfolio/{holding['id']}", json={"quantity": 4}, headers=auth_headers
        )
        assert response.json()["quantity"] == 4
        assert response.json()["profitLoss"] == 2000

        response = client.delete(f"{API}/portfolio/{holding['id']}", headers=auth_headers)
        assert response.json()["message"] == "Stock removed from portfolio"
        assert client.get(f"{API}/portfolio", headers=auth_headers).json() == []


class TestProfileEndpoints:
    """Tests for /api/v1/profile, deposits and withdrawals."""

    def test_capital_summary(self, client, auth_headers) -> None:
        client.put(
            f"{API}/profile", json={"name": "Asha", "initialCapital": 10000}, headers=auth_headers
        )
        client.post(
            f"{API}/profile/deposits",
            json={"amount": 5000, "date": "2024-01-10", "reason": "Top up"},
            headers=auth_headers,
        )
        client.post(
            f"{API}/profile/withdrawals",
            json={"amount": 1000, "date": "2024-01-20"},
            headers=auth_headers,
        )
        create_trade(client, auth_headers)

        profile = client.get(f"{API}/profile", headers=auth_headers).json()
        assert profile["name"] == "Asha"
        assert profile["initialCapital"] == 10000
        assert profile["totalDeposits"] == 5000
        assert profile["totalWithdrawals"] == 1000
        assert profile["currentCapital"] == 14000
        assert profile["realizedPL"] == 80

    def test_deposit_list_and_delete(self, client, auth_headers) -> None:
        deposit = client.post(
            f"{API}/profile/deposits",
            json={"amount": 2500, "date": "2024-01-10"},
            headers=auth_headers,
        )
        assert deposit.status_code == 201
        listing = client.get(f"{API}/profile/deposits", headers=auth_headers).json()
        assert listing["totalDeposits"] == 2500
        assert len(listing["deposits"]) == 1

        deposit_id = deposit.json()["id"]
        response = client.delete(f"{API}/profile/withdrawals/{deposit_id}", headers=auth_headers)
        assert response.status_code == 404
        response = client.delete(f"{API}/profile/deposits/{deposit_id}", headers=auth_headers)
        assert response.status_code == 200

    def test_non_positive_amount_rejected(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/profile/withdrawals",
            json={"amount": 0, "date": "2024-01-10"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_change_password(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/profile/change-password",
            json={"currentPassword": "Nope12345", "newPassword": "NewSecret1"},
            headers=auth_headers,
        )
        assert response.status_code == 401

        response = client.post(
            f"{API}/profile/change-password",
            json={"currentPassword": "Secret123", "newPassword": "NewSecret1"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        response = client.post(
            f"{API}/auth/signin", json={"email": "trader@example.com", "password": "NewSecret1"}
        )
        assert response.status_code == 200

    def test_reset_wipes_journal(self, client, auth_headers) -> None:
        client.put(
            f"{API}/profile", json={"name": "Asha", "initialCapital": 10000}, headers=auth_headers
        )
        create_trade(client, auth_headers)
        client.post(
            f"{API}/portfolio",
            json={"symbol": "TCS", "quantity": 1, "averagePrice": 3000},
            headers=auth_headers,
        )

        response = client.delete(f"{API}/profile/reset", headers=auth_headers)
        assert response.json()["message"] == "All data has been reset successfully"

        assert client.get(f"{API}/intraday", headers=auth_headers).json()["data"] == []
        assert client.get(f"{API}/portfolio", headers=auth_headers).json() == []
        assert client.get(f"{API}/profile", headers=auth_headers).json()["initialCapital"] == 0


class TestAnalyticsEndpoints:
    """Tests for dashboard statistics and reports."""

    def test_dashboard_stats(self, client, auth_headers) -> None:
        create_trade(client, auth_headers)
        create_trade(client, auth_headers, sellPrice=95, mood="FOMO")
        client.post(
            f"{API}/portfolio",
            json={"symbol": "TCS", "quantity": 2, "averagePrice": 3000},
            headers=auth_headers,
        )

        stats = client.get(f"{API}/dashboard/stats", headers=auth_headers).json()
        assert stats["totalTrades"] == 2
        assert stats["totalPL"] == 80 - 70
        assert stats["winRate"] == 50
        assert stats["bestTrade"] == 80
        assert stats["worstTrade"] == -70
        assert stats["portfolioValue"] == 7000
        assert stats["portfolioPL"] == 1000
        assert stats["period"] == "all"

    def test_invalid_period(self, client, auth_headers) -> None:
        response = client.get(f"{API}/dashboard/stats?period=decade", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid period: decade"

    def test_report(self, client, auth_headers) -> None:
        create_trade(client, auth_headers, tradeDate="2024-01-12")
        create_trade(client, auth_headers, tradeDate="2024-01-15", script="TCS")

        report = client.get(f"{API}/reports?period=all", headers=auth_headers).json()
        assert report["period"] == "all"
        assert report["startDate"] is None
        assert report["stats"]["totalTrades"] == 2
        assert report["stats"]["tradedScripts"] == ["TCS", "RELIANCE"]
        assert [w["key"] for w in report["weekdayPerformance"]] == ["Monday", "Friday"]
        assert report["dailyTrend"][-1]["cumulativePL"] == 160
        assert report["streaks"]["longestStreak"] == 2

    def test_custom_report_bounds(self, client, auth_headers) -> None:
        response = client.get(
            f"{API}/reports?period=custom&start=2024-02-10&end=2024-02-01",
            headers=auth_headers,
        )
        assert response.status_code == 400


class TestInsightsEndpoints:
    """Tests for AI insights and the cached insight statistics."""

    def test_insights_need_trades(self, client, auth_headers, insight_model) -> None:
        response = client.post(f"{API}/insights", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "No trades found"
        assert insight_model.calls == []

    def test_insights_cached(self, client, auth_headers, insight_model) -> None:
        create_trade(client, auth_headers)

        first = client.post(f"{API}/insights", headers=auth_headers)
        assert first.status_code == 200
        assert first.headers["X-Cache"] == "MISS"
        body = first.json()
        assert body["success"] is True
        assert body["tradesAnalyzed"] == 1
        assert body["insights"]["tradingPsychology"]["summary"] == "You trade best when calm."
        assert body["insights"]["moodPerformance"]["bestMood"] == "CALM"

        second = client.post(f"{API}/insights", headers=auth_headers)
        assert second.headers["X-Cache"] == "HIT"
        refreshed = client.post(f"{API}/insights?refresh=true", headers=auth_headers)
        assert refreshed.headers["X-Cache"] == "MISS"
        assert len(insight_model.calls) == 2
        assert json.loads(insight_model.calls[0]["recent_trades"])[0]["script"] == "RELIANCE"

    def test_insight_stats(self, client, auth_headers) -> None:
        create_trade(client, auth_headers)
        first = client.get(f"{API}/insights/stats", headers=auth_headers)
        assert first.headers["X-Cache"] == "MISS"
        assert first.json()["totalTrades"] == 1
        assert first.json()["moodDistribution"] == {"CALM": 1}
        second = client.get(f"{API}/insights/stats", headers=auth_headers)
        assert second.headers["X-Cache"] == "HIT"


class TestStockEndpoints:
    """Tests for /api/v1/stocks."""

    def test_quote_with_chart(self, client, auth_headers) -> None:
        response = client.get(f"{API}/stocks/reliance?range=1mo", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "RELIANCE.NS"
        assert body["price"] == 2500
        assert len(body["chartData"]) == 30
        assert set(body["indicators"]) == {"ema9", "ema20", "rsi14", "rsiEma20"}
        assert len(body["indicators"]["ema9"]) == 22

    def test_unknown_symbol(self, client, auth_headers) -> None:
        response = client.get(f"{API}/stocks/nosuchco", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Stock not found: NOSUCHCO.NS"

    def test_invalid_range(self, client, auth_headers) -> None:
        response = client.get(f"{API}/stocks/reliance?range=7d", headers=auth_headers)
        assert response.status_code == 422

    def test_market_status(self, client, auth_headers) -> None:
        body = client.get(f"{API}/stocks/market-status", headers=auth_headers).json()
        assert body["exchange"] == "NSE"
        assert isinstance(body["isOpen"], bool)


class TestToolEndpoints:
    """Tests for /api/v1/tools calculators."""

    def test_profit_loss(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/tools/pl",
            json={"entryPrice": 100, "exitPrice": 110, "quantity": 10},
            headers=auth_headers,
        )
        body = response.json()
        assert body["grossPL"] == 100
        assert body["netPL"] == 100 - body["totalCharges"]
        assert body["charges"]["brokerage"] == 40
        assert body["charges"]["total"] == body["totalCharges"]

    def test_position_size(self, client, auth_headers) -> None:
        body = client.post(
            f"{API}/tools/position-size",
            json={"accountSize": 100000, "riskPercent": 1, "entryPrice": 500, "stopLoss": 490},
            headers=auth_headers,
        ).json()
        assert body["shares"] == 100
        assert body["direction"] == "LONG"
        assert body["riskLevel"] == "Conservative"

    def test_short_risk_reward(self, client, auth_headers) -> None:
        body = client.post(
            f"{API}/tools/risk-reward",
            json={"entryPrice": 100, "stopLoss": 105, "targetPrice": 85, "quantity": 10},
            headers=auth_headers,
        ).json()
        assert body["direction"] == "SHORT"
        assert body["riskRewardRatio"] == 3

    def test_lot_size(self, client, auth_headers) -> None:
        body = client.post(
            f"{API}/tools/lot-size",
            json={"instrument": "NIFTY", "riskAmount": 10000, "stopLossPoints": 20},
            headers=auth_headers,
        ).json()
        assert body["lotsByRisk"] == 6
        assert body["lotsByCapital"] is None
        assert body["recommendedQuantity"] == 450

    def test_unknown_instrument(self, client, auth_headers) -> None:
        response = client.post(
            f"{API}/tools/lot-size",
            json={"instrument": "DOWJONES", "riskAmount": 10000, "stopLossPoints": 20},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Unknown instrument: DOWJONES"

    def test_instruments(self, client, auth_headers) -> None:
        body = client.get(f"{API}/tools/instruments", headers=auth_headers).json()
        assert {i["symbol"] for i in body} >= {"NIFTY", "BANKNIFTY"}
        assert all(i["lotSize"] > 0 for i in body)


def post_raw(client, path: str, body: str, headers: dict[str, str]):
    """Post a hand-written JSON body; ``1e309`` and ``NaN`` survive as written."""
    return client.post(
        f"{API}{path}",
        content=body,
        headers={**headers, "Content-Type": "application/json"},
    )


class TestNonFiniteNumbers:
    """Infinite and NaN numbers are rejected before they reach the journal."""

    def test_overflowing_trade_price(self, client, auth_headers) -> None:
        body = json.dumps(TRADE).replace('"buyPrice": 100', '"buyPrice": 1e309')
        assert "1e309" in body
        response = post_raw(client, "/intraday", body, auth_headers)
        assert response.status_code == 422

        assert client.get(f"{API}/intraday", headers=auth_headers).json()["data"] == []
        stats = client.get(f"{API}/dashboard/stats", headers=auth_headers).json()
        assert stats["totalPL"] == 0
        assert stats["bestTrade"] == 0

    def test_nan_charges_on_update(self, client, auth_headers) -> None:
        trade = create_trade(client, auth_headers)
        response = client.put(
            f"{API}/intraday/{trade['id']}",
            content='{"charges": NaN}',
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_holding_price(self, client, auth_headers) -> None:
        body = '{"symbol": "TCS", "quantity": 1, "averagePrice": 1e309}'
        assert post_raw(client, "/portfolio", body, auth_headers).status_code == 422

    def test_deposit_amount(self, client, auth_headers) -> None:
        body = '{"amount": 1e309, "date": "2024-01-10"}'
        assert post_raw(client, "/profile/deposits", body, auth_headers).status_code == 422

    def test_calculator_input(self, client, auth_headers) -> None:
        body = '{"entryPrice": NaN, "exitPrice": 110, "quantity": 10}'
        assert post_raw(client, "/tools/pl", body, auth_headers).status_code == 422


def _request(headers: list[tuple[bytes, bytes]]) -> Request:
    return Request({"type": "http", "headers": headers, "client": ("9.9.9.9", 4321)})


class TestRateLimiting:
    """Tests for rate limit keys and the 429 response."""

    def test_key_uses_forwarded_ip(self) -> None:
        request = _request([(b"x-forwarded-for", b"1.2.3.4, 10.0.0.1")])
        assert rate_limit_key(request) == "ip:1.2.3.4"

    def test_key_falls_back_to_client(self) -> None:
        assert rate_limit_key(_request([])) == "ip:9.9.9.9"

    def test_key_prefers_user(self) -> None:
        request = _request([])
        request.state.user_id = "user-1"
        assert rate_limit_key(request) == "user:user-1"

    def test_rate_limit_returns_429(self) -> None:
        """Exceeding rate limit returns HTTP 429 with a retry hint."""
        exc = MagicMock()
        exc.limit.limit.get_expiry.return_value = 60
        response = asyncio.run(rate_limit_exceeded_handler(_request([]), exc))
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert json.loads(response.body)["retryAfter"] == 60
