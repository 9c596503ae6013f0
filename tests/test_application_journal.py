"""
Tests for the journal application layer (use cases).

Tests use cases with mocked ports. No real infrastructure needed.
Each test verifies orchestration logic, not business rules.
"""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import pytest

from tradejournal.application.journal.analytics import (
    GenerateInsightsUseCase,
    GetInsightStatsUseCase,
    GetReportUseCase,
)
from tradejournal.application.journal.auth import (
    ResolveCurrentUserUseCase,
    SignInUseCase,
    SignUpUseCase,
)
from tradejournal.application.journal.dtos import (
    AddHoldingCommand,
    ChangePasswordCommand,
    GenerateInsightsCommand,
    ImportTradesCommand,
    ListTradesQuery,
    ReportQuery,
    SignInCommand,
    SignUpCommand,
    StockChartQuery,
    UpdateTradeCommand,
)
from tradejournal.application.journal.portfolio import AddHoldingUseCase, ListPortfolioUseCase
from tradejournal.application.journal.profile import ChangePasswordUseCase, GetProfileUseCase
from tradejournal.application.journal.stocks import GetMarketStatusUseCase, GetStockChartUseCase
from tradejournal.application.journal.trades import (
    ImportTradesUseCase,
    ListTradesUseCase,
    UpdateTradeUseCase,
)
from tradejournal.domain.journal.entities import (
    CapitalFlow,
    CapitalFlowKind,
    IntradayTrade,
    PortfolioStock,
    StockQuote,
    TradeType,
    User,
)
from tradejournal.domain.journal.errors import (
    AuthenticationRequiredError,
    DuplicateHoldingError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    NoTradesError,
    SymbolNotFoundError,
    TradeNotFoundError,
)
from tradejournal.domain.journal.ports import (
    CapitalFlowRepository,
    InsightModelPort,
    PasswordHasherPort,
    PortfolioRepository,
    QuoteProviderPort,
    TokenServicePort,
    TradeRepository,
    UserRepository,
)
from tradejournal.infrastructure.journal.cache import TTLCache


def _trade(trade_date: date = date(2024, 1, 15), sell: float = 110.0) -> IntradayTrade:
    trade = IntradayTrade(
        user_id="u1",
        trade_date=trade_date,
        script="RELIANCE",
        trade_type=TradeType.BUY,
        quantity=10,
        buy_price=100.0,
        sell_price=sell,
    )
    trade.recalculate()
    return trade


def _quote(symbol: str, price: float) -> StockQuote:
    return StockQuote(
        symbol=symbol,
        price=price,
        change=0.0,
        change_percent=0.0,
        open=price,
        high=price,
        low=price,
        previous_close=price,
        timestamp=0,
    )


class TestSignUpUseCase:
    """Tests for the SignUpUseCase."""

    def test_registers_with_hashed_password(self) -> None:
        """The password is hashed before the user is stored."""
        users = MagicMock(spec=UserRepository)
        users.get_by_email.return_value = None
        hasher = MagicMock(spec=PasswordHasherPort)
        hasher.hash.return_value = "hashed"

        user = SignUpUseCase(users, hasher).execute(
            SignUpCommand(email=" Trader@Example.com ", password="Secret123", name="T")
        )

        assert user.email == "trader@example.com"
        assert user.password_hash == "hashed"
        users.add.assert_called_once_with(user)

    def test_duplicate_email_raises(self) -> None:
        users = MagicMock(spec=UserRepository)
        users.get_by_email.return_value = User(email="a@b.com", password_hash="x")
        with pytest.raises(EmailAlreadyRegisteredError):
            SignUpUseCase(users, MagicMock(spec=PasswordHasherPort)).execute(
                SignUpCommand(email="a@b.com", password="Secret123")
            )
        users.add.assert_not_called()


class TestSignInUseCase:
    """Tests for the SignInUseCase."""

    def setup_method(self) -> None:
        self.user = User(email="a@b.com", password_hash="hashed")
        self.users = MagicMock(spec=UserRepository)
        self.users.get_by_email.return_value = self.user
        self.hasher = MagicMock(spec=PasswordHasherPort)
        self.tokens = MagicMock(spec=TokenServicePort)
        self.tokens.issue.return_value = ("token", 3600)

    def test_valid_credentials_issue_token(self) -> None:
        self.hasher.verify.return_value = True
        result = SignInUseCase(self.users, self.hasher, self.tokens).execute(
            SignInCommand(email="A@B.com", password="Secret123")
        )
        assert result.access_token == "token"
        assert result.expires_in == 3600
        self.users.get_by_email.assert_called_once_with("a@b.com")
        self.tokens.issue.assert_called_once_with(self.user.id)

    def test_wrong_password_raises(self) -> None:
        self.hasher.verify.return_value = False
        with pytest.raises(InvalidCredentialsError):
            SignInUseCase(self.users, self.hasher, self.tokens).execute(
                SignInCommand(email="a@b.com", password="wrong")
            )
        self.tokens.issue.assert_not_called()

    def test_unknown_email_raises(self) -> None:
        """Unknown emails fail exactly like wrong passwords."""
        self.users.get_by_email.return_value = None
        with pytest.raises(InvalidCredentialsError):
            SignInUseCase(self.users, self.hasher, self.tokens).execute(
                SignInCommand(email="x@b.com", password="Secret123")
            )


class TestResolveCurrentUserUseCase:
    def test_missing_token(self) -> None:
        use_case = ResolveCurrentUserUseCase(
            MagicMock(spec=UserRepository), MagicMock(spec=TokenServicePort)
        )
        with pytest.raises(AuthenticationRequiredError):
            use_case.execute(None)

    def test_token_for_deleted_user(self) -> None:
        users = MagicMock(spec=UserRepository)
        users.get_by_id.return_value = None
        tokens = MagicMock(spec=TokenServicePort)
        tokens.decode.return_value = "gone"
        with pytest.raises(AuthenticationRequiredError):
            ResolveCurrentUserUseCase(users, tokens).execute("token")


class TestProfileUseCases:
    """Tests for the profile and password use cases."""

    def test_profile_sums_capital_and_pl(self) -> None:
        user = User(email="a@b.com", password_hash="x", initial_capital=10_000.0)
        users = MagicMock(spec=UserRepository)
        users.get_by_id.return_value = user
        flows = MagicMock(spec=CapitalFlowRepository)
        flows.list_for_user.side_effect = lambda _uid, kind: (
            [CapitalFlow(user.id, kind, 5000.0, date(2024, 1, 1))]
            if kind is CapitalFlowKind.DEPOSIT
            else [CapitalFlow(user.id, kind, 2000.0, date(2024, 1, 2))]
        )
        trades = MagicMock(spec=TradeRepository)
        trades.list_for_user.return_value = [_trade(sell=110.0), _trade(sell=95.0)]

        result = GetProfileUseCase(users, flows, trades).execute(user.id)

        assert result.total_deposits == 5000.0
        assert result.total_withdrawals == 2000.0
        assert result.current_capital == 13_000.0
        assert result.realized_pl == pytest.approx(50.0)

    def test_change_password_requires_current(self) -> None:
        users = MagicMock(spec=UserRepository)
        users.get_by_id.return_value = User(email="a@b.com", password_hash="x")
        hasher = MagicMock(spec=PasswordHasherPort)
        hasher.verify.return_value = False
        with pytest.raises(AuthenticationRequiredError):
            ChangePasswordUseCase(users, hasher).execute(
                ChangePasswordCommand(user_id="u1", current_password="a", new_password="Secret123")
            )
        users.save.assert_not_called()


class TestTradeUseCases:
    """Tests for listing, updating and importing trades."""

    def test_list_clamps_page_size(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.page_for_user.return_value = ([], 250)
        page = ListTradesUseCase(repo).execute(ListTradesQuery(user_id="u1", page=3, limit=500))
        repo.page_for_user.assert_called_once_with("u1", offset=200, limit=100)
        assert page.total_pages == 3

    def test_list_all(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.list_for_user.return_value = [_trade(), _trade()]
        page = ListTradesUseCase(repo).execute(ListTradesQuery(user_id="u1", all=True))
        assert page.total == 2
        assert page.total_pages == 1
        repo.page_for_user.assert_not_called()

    def test_update_recalculates(self) -> None:
        """Changing a price re-derives the P&L."""
        trade = _trade()
        repo = MagicMock(spec=TradeRepository)
        repo.get.return_value = trade
        updated = UpdateTradeUseCase(repo).execute(
            UpdateTradeCommand(user_id="u1", trade_id=trade.id, sell_price=120.0, remarks="")
        )
        assert updated.profit_loss == pytest.approx(200.0)
        assert updated.remarks is None
        repo.save.assert_called_once_with(trade)

    def test_update_missing_trade(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.get.return_value = None
        with pytest.raises(TradeNotFoundError):
            UpdateTradeUseCase(repo).execute(UpdateTradeCommand(user_id="u1", trade_id="nope"))

    def test_import_writes_valid_rows_once(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.add_many.side_effect = lambda trades: len(trades)
        content = (
            "Date,Script,Quantity,Entry Price,Exit Price\n"
            "2024-01-15,TCS,1,100,110\n"
            "2024-01-16,TCS,x,100,110\n"
        )
        result = ImportTradesUseCase(repo).execute(
            ImportTradesCommand(user_id="u1", content=content)
        )
        assert result.imported == 1
        assert result.failed == 1
        repo.add_many.assert_called_once()


class TestPortfolioUseCases:
    """Tests for holdings and price refresh."""

    def test_add_duplicate_symbol(self) -> None:
        repo = MagicMock(spec=PortfolioRepository)
        repo.get_by_symbol.return_value = PortfolioStock("u1", "TCS", 100.0, 1)
        with pytest.raises(DuplicateHoldingError):
            AddHoldingUseCase(repo, MagicMock(spec=QuoteProviderPort)).execute(
                AddHoldingCommand(user_id="u1", symbol="tcs", quantity=1, average_price=100.0)
            )

    def test_add_prices_with_nse_symbol(self) -> None:
        repo = MagicMock(spec=PortfolioRepository)
        repo.get_by_symbol.return_value = None
        quotes = MagicMock(spec=QuoteProviderPort)
        quotes.get_quote.return_value = _quote("TCS.NS", 110.0)

        holding = AddHoldingUseCase(repo, quotes).execute(
            AddHoldingCommand(user_id="u1", symbol="tcs", quantity=10, average_price=100.0)
        )

        quotes.get_quote.assert_called_once_with("TCS.NS")
        assert holding.symbol == "TCS"
        assert holding.profit_loss == pytest.approx(100.0)

    def test_refresh_skips_unknown_symbols(self) -> None:
        """A failed quote keeps the previous price; the rest are saved together."""
        known = PortfolioStock("u1", "TCS", 100.0, 10)
        unknown = PortfolioStock("u1", "ZZZ", 50.0, 1, current_price=55.0)
        repo = MagicMock(spec=PortfolioRepository)
        repo.list_for_user.return_value = [known, unknown]
        quotes = MagicMock(spec=QuoteProviderPort)
        quotes.get_quote.side_effect = lambda s: _quote(s, 120.0) if s == "TCS.NS" else None

        view = ListPortfolioUseCase(repo, quotes).execute("u1", update_prices=True)

        assert view.prices_updated == 1
        assert known.current_price == 120.0
        assert unknown.current_price == 55.0
        repo.save_many.assert_called_once_with([known])

    def test_list_without_refresh_does_not_fetch(self) -> None:
        repo = MagicMock(spec=PortfolioRepository)
        repo.list_for_user.return_value = [PortfolioStock("u1", "TCS", 100.0, 10)]
        quotes = MagicMock(spec=QuoteProviderPort)
        ListPortfolioUseCase(repo, quotes).execute("u1")
        quotes.get_quote.assert_not_called()


class TestAnalyticsUseCases:
    """Tests for reports, statistics caching and AI insights."""

    def test_report_streaks_use_all_trades(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.list_for_user.return_value = [_trade()]
        result = GetReportUseCase(repo).execute(ReportQuery(user_id="u1", period="monthly"))
        assert repo.list_for_user.call_count == 2
        assert result.streaks.trading_days == 1

    def test_insight_stats_cached(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.list_for_user.return_value = [_trade()]
        use_case = GetInsightStatsUseCase(repo, TTLCache(60))

        first = use_case.execute("u1")
        second = use_case.execute("u1")

        assert not first.cache_hit
        assert second.cache_hit
        assert second.data["totalTrades"] == 1
        repo.list_for_user.assert_called_once()

    def test_insights_require_trades(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.list_for_user.return_value = []
        model = MagicMock(spec=InsightModelPort)
        with pytest.raises(NoTradesError):
            GenerateInsightsUseCase(repo, model, TTLCache(60)).execute(
                GenerateInsightsCommand(user_id="u1")
            )
        model.generate.assert_not_called()

    def test_insights_cached_until_refresh(self) -> None:
        repo = MagicMock(spec=TradeRepository)
        repo.list_for_user.return_value = [_trade()]
        model = MagicMock(spec=InsightModelPort)
        model.generate.return_value = '{"recommendations": {"topTips": ["Size down"]}}'
        use_case = GenerateInsightsUseCase(repo, model, TTLCache(60))

        first = use_case.execute(GenerateInsightsCommand(user_id="u1"))
        cached = use_case.execute(GenerateInsightsCommand(user_id="u1"))
        refreshed = use_case.execute(GenerateInsightsCommand(user_id="u1", refresh=True))

        assert not first.cache_hit
        assert cached.cache_hit
        assert not refreshed.cache_hit
        assert model.generate.call_count == 2
        assert first.data.insights["recommendations"]["topTips"] == ["Size down"]
        assert first.data.trades_analyzed == 1


class TestStockUseCases:
    """Tests for quotes, charts and market hours."""

    def test_unknown_symbol(self) -> None:
        quotes = MagicMock(spec=QuoteProviderPort)
        quotes.get_quote.return_value = None
        with pytest.raises(SymbolNotFoundError):
            GetStockChartUseCase(quotes).execute(StockChartQuery(symbol="nope"))

    def test_chart_normalises_symbol(self) -> None:
        quotes = MagicMock(spec=QuoteProviderPort)
        quotes.get_quote.return_value = _quote("INFY.NS", 1500.0)
        quotes.get_chart.return_value = []
        result = GetStockChartUseCase(quotes).execute(
            StockChartQuery(symbol="infy", range="1mo", interval="1d")
        )
        quotes.get_chart.assert_called_once_with("INFY.NS", "1mo", "1d")
        assert result.overlays["ema9"] == []

    def test_market_status(self) -> None:
        monday_morning = datetime(2024, 1, 15, 4, 0, tzinfo=timezone.utc)
        status = GetMarketStatusUseCase().execute(monday_morning)
        assert status.exchange == "NSE"
        assert status.is_open
        assert status.checked_at == monday_morning
