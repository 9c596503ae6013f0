"""
Use cases: stock quotes, chart data with indicator overlays, market hours.

Input: StockChartQuery
Output: StockChartResult, MarketStatus
Side effects: Calls the quote provider (cached).
Failure cases: SymbolNotFoundError.
"""

import logging
from datetime import datetime

from tradejournal.application.journal.dtos import (
    MarketStatus,
    StockChartQuery,
    StockChartResult,
)
from tradejournal.domain.journal.entities import utcnow
from tradejournal.domain.journal.errors import SymbolNotFoundError
from tradejournal.domain.journal.indicators import chart_overlays
from tradejournal.domain.journal.market import is_market_open, normalize_symbol
from tradejournal.domain.journal.ports import QuoteProviderPort

logger = logging.getLogger(__name__)


class GetStockChartUseCase:
    def __init__(self, quotes: QuoteProviderPort) -> None:
        self._quotes = quotes

    def execute(self, query: StockChartQuery) -> StockChartResult:
        """Run the chart use case.

        Args:
            query: Symbol (with or without exchange suffix), range and interval.

        Returns:
            Current quote, candles and the EMA/RSI overlays.

        Raises:
            SymbolNotFoundError: If no quote exists for the symbol.
        """
        symbol = normalize_symbol(query.symbol)
        quote = self._quotes.get_quote(symbol)
        if quote is None:
            raise SymbolNotFoundError(symbol)

        candles = self._quotes.get_chart(symbol, query.range, query.interval)
        logger.info("Loaded %d candles for %s (%s/%s)", len(candles), symbol, query.range, query.interval)
        return StockChartResult(quote=quote, candles=candles, overlays=chart_overlays(candles))


class GetMarketStatusUseCase:
    def execute(self, now: datetime | None = None) -> MarketStatus:
        checked_at = now or utcnow()
        return MarketStatus(
            exchange="NSE", is_open=is_market_open(checked_at), checked_at=checked_at
        )
