"""
Stock routes: quotes, chart candles with indicator overlays, market hours.
"""

from fastapi import APIRouter, Depends, Query, Request

from tradejournal.application.journal.dtos import StockChartQuery
from tradejournal.application.journal.stocks import GetMarketStatusUseCase, GetStockChartUseCase
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import User
from tradejournal.interfaces.journal.dependencies import (
    get_current_user,
    get_market_status_use_case,
    get_stock_chart_use_case,
)
from tradejournal.interfaces.journal.schemas import MarketStatusResponse, StockResponse
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/stocks", tags=["stocks"])

RANGE_PATTERN = r"^(1d|5d|1mo|3mo|6mo|1y|2y|5y|10y|ytd|max)$"
INTERVAL_PATTERN = r"^(1m|2m|5m|15m|30m|60m|90m|1h|1d|5d|1wk|1mo|3mo)$"


@router.get(
    "/market-status",
    response_model=MarketStatusResponse,
    summary="NSE market status",
    description="Whether NSE is open (Mon-Fri 09:15-15:30 IST).",
)
@limiter.limit(settings.rate_limit_standard)
def market_status(
    request: Request,
    user: User = Depends(get_current_user),
    use_case: GetMarketStatusUseCase = Depends(get_market_status_use_case),
) -> MarketStatusResponse:
    status = use_case.execute()
    return MarketStatusResponse(
        exchange=status.exchange, is_open=status.is_open, checked_at=status.checked_at
    )


@router.get(
    "/{symbol}",
    response_model=StockResponse,
    summary="Quote and chart",
    description="Current quote, OHLCV candles and EMA 9/20, RSI 14 and RSI EMA 20 overlays.",
)
@limiter.limit(settings.rate_limit_standard)
def stock_chart(
    request: Request,
    symbol: str,
    range: str = Query("3mo", pattern=RANGE_PATTERN),
    interval: str = Query("1d", pattern=INTERVAL_PATTERN),
    user: User = Depends(get_current_user),
    use_case: GetStockChartUseCase = Depends(get_stock_chart_use_case),
) -> StockResponse:
    result = use_case.execute(StockChartQuery(symbol=symbol, range=range, interval=interval))
    return StockResponse.build(result.quote, result.candles, result.overlays)

