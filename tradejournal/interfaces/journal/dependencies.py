"""
Dependency injection for the journal bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the journal context.
"""

from collections.abc import Iterator
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from tradejournal.application.journal.analytics import (
    GenerateInsightsUseCase,
    GetDashboardStatsUseCase,
    GetInsightStatsUseCase,
    GetReportUseCase,
)
from tradejournal.application.journal.auth import (
    ResolveCurrentUserUseCase,
    SignInUseCase,
    SignUpUseCase,
)
from tradejournal.application.journal.portfolio import (
    AddHoldingUseCase,
    DeleteHoldingUseCase,
    ListPortfolioUseCase,
    UpdateHoldingUseCase,
)
from tradejournal.application.journal.profile import (
    AddCapitalFlowUseCase,
    ChangePasswordUseCase,
    DeleteCapitalFlowUseCase,
    GetProfileUseCase,
    ListCapitalFlowsUseCase,
    ResetAccountUseCase,
    UpdateProfileUseCase,
)
from tradejournal.application.journal.stocks import (
    GetMarketStatusUseCase,
    GetStockChartUseCase,
)
from tradejournal.application.journal.trades import (
    CreateTradeUseCase,
    DeleteTradeUseCase,
    ExportTradesUseCase,
    ImportTradesUseCase,
    ListTradesUseCase,
    UpdateTradeUseCase,
)
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import User
from tradejournal.domain.journal.ports import (
    CachePort,
    InsightModelPort,
    PasswordHasherPort,
    QuoteProviderPort,
    TokenServicePort,
)
from tradejournal.infrastructure.database import get_session
from tradejournal.infrastructure.journal.cache import TTLCache
from tradejournal.infrastructure.journal.openai_insight_adapter import OpenAIInsightAdapter
from tradejournal.infrastructure.journal.quote_adapter import YahooQuoteAdapter
from tradejournal.infrastructure.journal.repositories import (
    SqlCapitalFlowRepository,
    SqlPortfolioRepository,
    SqlTradeRepository,
    SqlUserRepository,
)
from tradejournal.infrastructure.journal.security import BcryptPasswordHasher, JwtTokenService

bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------
# Shared infrastructure
# ------------------------------------------------------------------


def get_db_session() -> Iterator[Session]:
    """One SQLAlchemy session per request."""
    yield from get_session()


@lru_cache
def get_password_hasher() -> PasswordHasherPort:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


@lru_cache
def get_token_service() -> TokenServicePort:
    return JwtTokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )


@lru_cache
def get_quote_cache() -> CachePort:
    return TTLCache(settings.quote_cache_ttl_seconds)


@lru_cache
def get_insights_cache() -> CachePort:
    return TTLCache(settings.insights_cache_ttl_seconds)


@lru_cache
def get_stats_cache() -> CachePort:
    return TTLCache(settings.stats_cache_ttl_seconds)


@lru_cache
def get_quote_provider() -> QuoteProviderPort:
    return YahooQuoteAdapter(
        base_url=settings.quote_api_base_url,
        cache=get_quote_cache(),
        timeout=settings.quote_api_timeout_seconds,
    )


@lru_cache
def get_insight_model() -> InsightModelPort:
    return OpenAIInsightAdapter(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
        timeout=settings.openai_timeout_seconds,
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_db_session),
    tokens: TokenServicePort = Depends(get_token_service),
) -> User:
    """Resolve the bearer token to a user.

    The user id is stored on ``request.state`` so the rate limiter
    can key authenticated requests by user.
    """
    token = credentials.credentials if credentials else None
    user = ResolveCurrentUserUseCase(SqlUserRepository(session), tokens).execute(token)
    request.state.user_id = user.id
    return user


# ------------------------------------------------------------------
# Auth
# ------------------------------------------------------------------


def get_sign_up_use_case(
    session: Session = Depends(get_db_session),
    hasher: PasswordHasherPort = Depends(get_password_hasher),
) -> SignUpUseCase:
    return SignUpUseCase(user_repo=SqlUserRepository(session), hasher=hasher)


def get_sign_in_use_case(
    session: Session = Depends(get_db_session),
    hasher: PasswordHasherPort = Depends(get_password_hasher),
    tokens: TokenServicePort = Depends(get_token_service),
) -> SignInUseCase:
    return SignInUseCase(user_repo=SqlUserRepository(session), hasher=hasher, tokens=tokens)


# ------------------------------------------------------------------
# Profile
# ------------------------------------------------------------------


def get_profile_use_case(session: Session = Depends(get_db_session)) -> GetProfileUseCase:
    return GetProfileUseCase(
        user_repo=SqlUserRepository(session),
        flow_repo=SqlCapitalFlowRepository(session),
        trade_repo=SqlTradeRepository(session),
    )


def get_update_profile_use_case(
    session: Session = Depends(get_db_session),
) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(user_repo=SqlUserRepository(session))


def get_change_password_use_case(
    session: Session = Depends(get_db_session),
    hasher: PasswordHasherPort = Depends(get_password_hasher),
) -> ChangePasswordUseCase:
    return ChangePasswordUseCase(user_repo=SqlUserRepository(session), hasher=hasher)


def get_reset_account_use_case(
    session: Session = Depends(get_db_session),
) -> ResetAccountUseCase:
    return ResetAccountUseCase(user_repo=SqlUserRepository(session))


def get_list_capital_flows_use_case(
    session: Session = Depends(get_db_session),
) -> ListCapitalFlowsUseCase:
    return ListCapitalFlowsUseCase(flow_repo=SqlCapitalFlowRepository(session))


def get_add_capital_flow_use_case(
    session: Session = Depends(get_db_session),
) -> AddCapitalFlowUseCase:
    return AddCapitalFlowUseCase(flow_repo=SqlCapitalFlowRepository(session))


def get_delete_capital_flow_use_case(
    session: Session = Depends(get_db_session),
) -> DeleteCapitalFlowUseCase:
    return DeleteCapitalFlowUseCase(flow_repo=SqlCapitalFlowRepository(session))


# ------------------------------------------------------------------
# Intraday trades
# ------------------------------------------------------------------


def get_list_trades_use_case(session: Session = Depends(get_db_session)) -> ListTradesUseCase:
    return ListTradesUseCase(trade_repo=SqlTradeRepository(session))


def get_create_trade_use_case(session: Session = Depends(get_db_session)) -> CreateTradeUseCase:
    return CreateTradeUseCase(trade_repo=SqlTradeRepository(session))


def get_update_trade_use_case(session: Session = Depends(get_db_session)) -> UpdateTradeUseCase:
    return UpdateTradeUseCase(trade_repo=SqlTradeRepository(session))


def get_delete_trade_use_case(session: Session = Depends(get_db_session)) -> DeleteTradeUseCase:
    return DeleteTradeUseCase(trade_repo=SqlTradeRepository(session))


def get_import_trades_use_case(
    session: Session = Depends(get_db_session),
) -> ImportTradesUseCase:
    return ImportTradesUseCase(trade_repo=SqlTradeRepository(session))


def get_export_trades_use_case(
    session: Session = Depends(get_db_session),
) -> ExportTradesUseCase:
    return ExportTradesUseCase(trade_repo=SqlTradeRepository(session))


# ------------------------------------------------------------------
# Portfolio
# ------------------------------------------------------------------


def get_list_portfolio_use_case(
    session: Session = Depends(get_db_session),
    quotes: QuoteProviderPort = Depends(get_quote_provider),
) -> ListPortfolioUseCase:
    return ListPortfolioUseCase(portfolio_repo=SqlPortfolioRepository(session), quotes=quotes)


def get_add_holding_use_case(
    session: Session = Depends(get_db_session),
    quotes: QuoteProviderPort = Depends(get_quote_provider),
) -> AddHoldingUseCase:
    return AddHoldingUseCase(portfolio_repo=SqlPortfolioRepository(session), quotes=quotes)


def get_update_holding_use_case(
    session: Session = Depends(get_db_session),
) -> UpdateHoldingUseCase:
    return UpdateHoldingUseCase(portfolio_repo=SqlPortfolioRepository(session))


def get_delete_holding_use_case(
    session: Session = Depends(get_db_session),
) -> DeleteHoldingUseCase:
    return DeleteHoldingUseCase(portfolio_repo=SqlPortfolioRepository(session))


# ------------------------------------------------------------------
# Dashboard, reports and insights
# ------------------------------------------------------------------


def get_dashboard_stats_use_case(
    session: Session = Depends(get_db_session),
) -> GetDashboardStatsUseCase:
    return GetDashboardStatsUseCase(
        trade_repo=SqlTradeRepository(session),
        portfolio_repo=SqlPortfolioRepository(session),
    )


def get_report_use_case(session: Session = Depends(get_db_session)) -> GetReportUseCase:
    return GetReportUseCase(trade_repo=SqlTradeRepository(session))


def get_insight_stats_use_case(
    session: Session = Depends(get_db_session),
    cache: CachePort = Depends(get_stats_cache),
) -> GetInsightStatsUseCase:
    return GetInsightStatsUseCase(trade_repo=SqlTradeRepository(session), cache=cache)


def get_generate_insights_use_case(
    session: Session = Depends(get_db_session),
    model: InsightModelPort = Depends(get_insight_model),
    cache: CachePort = Depends(get_insights_cache),
) -> GenerateInsightsUseCase:
    return GenerateInsightsUseCase(
        trade_repo=SqlTradeRepository(session), model=model, cache=cache
    )


# ------------------------------------------------------------------
# Stocks
# ------------------------------------------------------------------


def get_stock_chart_use_case(
    quotes: QuoteProviderPort = Depends(get_quote_provider),
) -> GetStockChartUseCase:
    return GetStockChartUseCase(quotes=quotes)


def get_market_status_use_case() -> GetMarketStatusUseCase:
    return GetMarketStatusUseCase()
