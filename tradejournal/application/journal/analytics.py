"""
Use cases: dashboard statistics, performance reports and AI insights.

Input: user id, period keywords, refresh flag
Output: DashboardStats, ReportResult, CachedResult
Side effects: Calls the language model; reads and writes the
process-local caches.
Failure cases: InvalidPeriodError, NoTradesError, InsightGenerationError.
"""

import logging
from datetime import date

from tradejournal.application.journal.dtos import (
    CachedResult,
    GenerateInsightsCommand,
    InsightsResult,
    ReportQuery,
    ReportResult,
)
from tradejournal.domain.journal.entities import utcnow
from tradejournal.domain.journal.errors import NoTradesError
from tradejournal.domain.journal.insights import (
    assemble_insights,
    parse_model_output,
    prompt_variables,
)
from tradejournal.domain.journal.ports import (
    CachePort,
    InsightModelPort,
    PortfolioRepository,
    TradeRepository,
)
from tradejournal.domain.journal.statistics import (
    DashboardStats,
    compute_dashboard_stats,
    compute_report_stats,
    dashboard_period_start,
    mood_distribution,
    mood_performance,
    pl_trend,
    report_date_range,
    script_performance,
    summarize_trades,
    trading_streaks,
    weekday_performance,
)

logger = logging.getLogger(__name__)


class GetDashboardStatsUseCase:
    def __init__(self, trade_repo: TradeRepository, portfolio_repo: PortfolioRepository) -> None:
        self._trade_repo = trade_repo
        self._portfolio_repo = portfolio_repo

    def execute(self, user_id: str, period: str = "all") -> DashboardStats:
        start = dashboard_period_start(period, date.today())
        trades = self._trade_repo.list_for_user(user_id, start=start)
        holdings = self._portfolio_repo.list_for_user(user_id)
        return compute_dashboard_stats(trades, holdings, period)


class GetReportUseCase:
    """Builds the full performance report for a period.

    Streaks are always computed over every trade of the user, since a
    streak crossing the period boundary is still one streak.
    """

    def __init__(self, trade_repo: TradeRepository) -> None:
        self._trade_repo = trade_repo

    def execute(self, query: ReportQuery) -> ReportResult:
        today = date.today()
        start, end = report_date_range(query.period, today, query.start, query.end)
        trades = self._trade_repo.list_for_user(query.user_id, start=start, end=end)
        all_trades = (
            trades
            if start is None and end is None
            else self._trade_repo.list_for_user(query.user_id)
        )
        return ReportResult(
            period=query.period,
            start=start,
            end=end,
            stats=compute_report_stats(trades),
            scripts=script_performance(trades),
            moods=mood_performance(trades),
            weekdays=weekday_performance(trades),
            trend=pl_trend(trades),
            streaks=trading_streaks([t.trade_date for t in all_trades], today),
        )


class GetInsightStatsUseCase:
    """Lightweight trade statistics for the insights page, cached per user."""

    def __init__(self, trade_repo: TradeRepository, cache: CachePort) -> None:
        self._trade_repo = trade_repo
        self._cache = cache

    def execute(self, user_id: str) -> CachedResult:
        key = f"stats_{user_id}"
        cached = self._cache.get(key)
        if cached is not None:
            return CachedResult(data=cached, cache_hit=True)

        trades = self._trade_repo.list_for_user(user_id)
        summary = summarize_trades(trades)
        data = {
            "totalTrades": summary.total_trades,
            "winningTrades": summary.winning_trades,
            "losingTrades": summary.losing_trades,
            "winRate": summary.win_rate,
            "totalPL": summary.total_pl,
            "avgPL": summary.avg_pl,
            "setupAdherenceRate": summary.setup_adherence_rate,
            "moodDistribution": mood_distribution(trades),
            "moodPerformance": [
                {
                    "mood": p.key,
                    "trades": p.trades,
                    "winRate": p.win_rate,
                    "avgPL": p.avg_pl,
                    "totalPL": p.total_pl,
                }
                for p in mood_performance(trades)
            ],
        }
        self._cache.set(key, data)
        return CachedResult(data=data, cache_hit=False)


class GenerateInsightsUseCase:
    """Asks the language model for behavioural insights on the user's trades.

    Results are cached per user; ``refresh`` bypasses the cache.
    """

    def __init__(
        self,
        trade_repo: TradeRepository,
        model: InsightModelPort,
        cache: CachePort,
    ) -> None:
        self._trade_repo = trade_repo
        self._model = model
        self._cache = cache

    def execute(self, command: GenerateInsightsCommand) -> CachedResult:
        key = f"insights_{command.user_id}"
        if not command.refresh:
            cached = self._cache.get(key)
            if cached is not None:
                return CachedResult(data=cached, cache_hit=True)

        trades = self._trade_repo.list_for_user(command.user_id)
        if not trades:
            raise NoTradesError()

        logger.info(
            "Generating insights for user id=%s from %d trades", command.user_id, len(trades)
        )
        raw = self._model.generate(prompt_variables(trades))
        insights = assemble_insights(parse_model_output(raw), trades)
        generated_at = utcnow()
        insights["generatedAt"] = generated_at.isoformat()

        result = InsightsResult(
            insights=insights,
            trades_analyzed=len(trades),
            generated_at=generated_at,
        )
        self._cache.set(key, result)
        return CachedResult(data=result, cache_hit=False)
