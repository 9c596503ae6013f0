"""
Use cases: intraday trade CRUD, CSV import and CSV export.

Input: trade commands and queries scoped to the calling user
Output: IntradayTrade, TradePage, ImportTradesResult, ExportResult
Side effects: Inserts, updates and deletes intraday trades.
Failure cases: TradeNotFoundError, CsvImportError, InvalidPeriodError.
"""

import logging
import math
from datetime import date

from tradejournal.application.journal.dtos import (
    CreateTradeCommand,
    ExportResult,
    ExportTradesQuery,
    ImportTradesCommand,
    ImportTradesResult,
    ListTradesQuery,
    TradePage,
    UpdateTradeCommand,
)
from tradejournal.domain.journal.csv_codec import export_trades_csv, parse_trades_csv
from tradejournal.domain.journal.entities import IntradayTrade, utcnow
from tradejournal.domain.journal.errors import TradeNotFoundError
from tradejournal.domain.journal.ports import TradeRepository
from tradejournal.domain.journal.statistics import compute_report_stats, report_date_range

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ListTradesUseCase:
    """Returns one page of the user's trades, newest first."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, query: ListTradesQuery) -> TradePage:
        if query.all:
            trades = self._trade_repo.list_for_user(query.user_id)
            return TradePage(
                trades=trades,
                page=1,
                limit=len(trades),
                total=len(trades),
                total_pages=1,
            )

        page = max(query.page, 1)
        limit = min(max(query.limit, 1), MAX_PAGE_SIZE)
        trades, total = self._trade_repo.page_for_user(
            query.user_id, offset=(page - 1) * limit, limit=limit
        )
        return TradePage(
            trades=trades,
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        )


class CreateTradeUseCase:
    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, command: CreateTradeCommand) -> IntradayTrade:
        trade = IntradayTrade(
            user_id=command.user_id,
            trade_date=command.trade_date,
            script=command.script.strip().upper(),
            trade_type=command.trade_type,
            quantity=command.quantity,
            buy_price=command.buy_price,
            sell_price=command.sell_price,
            charges=command.charges,
            follow_setup=command.follow_setup,
            mood=command.mood,
            remarks=command.remarks or None,
        )
        trade.recalculate()
        self._trade_repo.add(trade)
        logger.info(
            "Created trade id=%s script=%s net=%.2f", trade.id, trade.script, trade.net_profit_loss
        )
        return trade


class UpdateTradeUseCase:
    """Applies a partial update and re-derives the computed fields."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, command: UpdateTradeCommand) -> IntradayTrade:
        trade = self._trade_repo.get(command.user_id, command.trade_id)
        if trade is None:
            raise TradeNotFoundError(command.trade_id)

        if command.trade_date is not None:
            trade.trade_date = command.trade_date
        if command.script is not None:
            trade.script = command.script.strip().upper()
        if command.trade_type is not None:
            trade.trade_type = command.trade_type
        if command.quantity is not None:
            trade.quantity = command.quantity
        if command.buy_price is not None:
            trade.buy_price = command.buy_price
        if command.sell_price is not None:
            trade.sell_price = command.sell_price
        if command.charges is not None:
            trade.charges = command.charges
        if command.follow_setup is not None:
            trade.follow_setup = command.follow_setup
        if command.mood is not None:
            trade.mood = command.mood
        if command.remarks is not None:
            trade.remarks = command.remarks or None

        trade.recalculate()
        trade.updated_at = utcnow()
        self._trade_repo.save(trade)
        return trade


class DeleteTradeUseCase:
    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, user_id: str, trade_id: str) -> None:
        trade = self._trade_repo.get(user_id, trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)
        self._trade_repo.delete(trade)
        logger.info("Deleted trade id=%s", trade_id)


class ImportTradesUseCase:
    """Parses a CSV and stores every valid row in one transaction."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, command: ImportTradesCommand) -> ImportTradesResult:
        outcome = parse_trades_csv(command.content, command.user_id, command.mapping)
        imported = self._trade_repo.add_many(outcome.trades) if outcome.trades else 0
        logger.info(
            "Imported %d trades for user id=%s (%d failed)",
            imported,
            command.user_id,
            outcome.failed,
        )
        return ImportTradesResult(
            imported=imported, failed=outcome.failed, errors=outcome.errors
        )


def _period_label(period: str, start: date | None, end: date | None) -> str:
    if start is None or end is None:
        return "All time"
    if period == "weekly":
        return f"Week of {start.isoformat()}"
    if period == "monthly":
        return start.strftime("%B %Y")
    if period == "yearly":
        return str(start.year)
    return f"{start.isoformat()} - {end.isoformat()}"


class ExportTradesUseCase:
    """Renders the trades of a report period as a CSV download."""

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, query: ExportTradesQuery) -> ExportResult:
        today = date.today()
        start, end = report_date_range(query.period, today, query.start, query.end)
        trades = self._trade_repo.list_for_user(query.user_id, start=start, end=end)
        stats = compute_report_stats(trades)
        content = export_trades_csv(trades, stats, _period_label(query.period, start, end))
        return ExportResult(
            filename=f"trading-report-{query.period}-{today.isoformat()}.csv",
            content=content,
        )
