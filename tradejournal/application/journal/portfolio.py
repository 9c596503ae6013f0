"""
Use cases: long-term portfolio holdings.

Input: holding commands scoped to the calling user
Output: PortfolioView, PortfolioStock
Side effects: Inserts, updates and deletes holdings; fetches market quotes.
Failure cases: DuplicateHoldingError, HoldingNotFoundError.
"""

import logging

from tradejournal.application.journal.dtos import (
    AddHoldingCommand,
    PortfolioView,
    UpdateHoldingCommand,
)
from tradejournal.domain.journal.entities import PortfolioStock, utcnow
from tradejournal.domain.journal.errors import DuplicateHoldingError, HoldingNotFoundError
from tradejournal.domain.journal.market import normalize_symbol
from tradejournal.domain.journal.ports import PortfolioRepository, QuoteProviderPort

logger = logging.getLogger(__name__)


class ListPortfolioUseCase:
    """Lists holdings, optionally refreshing every market price first.

    Holdings whose quote cannot be fetched keep their previous price and
    P&L. All refreshed holdings are written in one transaction.
    """

    def __init__(self, portfolio_repo: PortfolioRepository, quotes: QuoteProviderPort) -> None:
        self._portfolio_repo = portfolio_repo
        self._quotes = quotes

    def execute(self, user_id: str, update_prices: bool = False) -> PortfolioView:
        holdings = self._portfolio_repo.list_for_user(user_id)
        if not update_prices or not holdings:
            return PortfolioView(holdings=holdings)

        now = utcnow()
        repriced = []
        for holding in holdings:
            quote = self._quotes.get_quote(normalize_symbol(holding.symbol))
            if quote is None:
                logger.warning("No quote for %s, keeping last known price", holding.symbol)
                continue
            holding.reprice(quote.price, now)
            holding.updated_at = now
            repriced.append(holding)

        if repriced:
            self._portfolio_repo.save_many(repriced)
        logger.info("Refreshed %d/%d holding prices", len(repriced), len(holdings))
        return PortfolioView(holdings=holdings, prices_updated=len(repriced))


class AddHoldingUseCase:
    def __init__(self, portfolio_repo: PortfolioRepository, quotes: QuoteProviderPort) -> None:
        self._portfolio_repo = portfolio_repo
        self._quotes = quotes

    def execute(self, command: AddHoldingCommand) -> PortfolioStock:
        symbol = command.symbol.strip().upper()
        if self._portfolio_repo.get_by_symbol(command.user_id, symbol) is not None:
            raise DuplicateHoldingError(symbol)

        holding = PortfolioStock(
            user_id=command.user_id,
            symbol=symbol,
            name=command.name,
            average_price=command.average_price,
            quantity=command.quantity,
            purchase_date=command.purchase_date,
        )
        quote = self._quotes.get_quote(normalize_symbol(symbol))
        if quote is not None:
            holding.reprice(quote.price, utcnow())

        self._portfolio_repo.add(holding)
        logger.info("Added holding %s for user id=%s", symbol, command.user_id)
        return holding


class UpdateHoldingUseCase:
    def __init__(self, portfolio_repo: PortfolioRepository) -> None:
        self._portfolio_repo = portfolio_repo

    def execute(self, command: UpdateHoldingCommand) -> PortfolioStock:
        holding = self._portfolio_repo.get(command.user_id, command.holding_id)
        if holding is None:
            raise HoldingNotFoundError(command.holding_id)

        if command.name is not None:
            holding.name = command.name or None
        if command.quantity is not None:
            holding.quantity = command.quantity
        if command.average_price is not None:
            holding.average_price = command.average_price
        if command.purchase_date is not None:
            holding.purchase_date = command.purchase_date

        holding.recalculate()
        holding.updated_at = utcnow()
        self._portfolio_repo.save(holding)
        return holding


class DeleteHoldingUseCase:
    def __init__(self, portfolio_repo: PortfolioRepository) -> None:
        self._portfolio_repo = portfolio_repo

    def execute(self, user_id: str, holding_id: str) -> None:
        holding = self._portfolio_repo.get(user_id, holding_id)
        if holding is None:
            raise HoldingNotFoundError(holding_id)
        self._portfolio_repo.delete(holding)
        logger.info("Deleted holding id=%s", holding_id)
