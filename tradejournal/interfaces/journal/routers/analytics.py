"""
Analytics routes: dashboard statistics, performance reports and AI insights.
"""

from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from tradejournal.application.journal.analytics import (
    GenerateInsightsUseCase,
    GetDashboardStatsUseCase,
    GetInsightStatsUseCase,
    GetReportUseCase,
)
from tradejournal.application.journal.dtos import GenerateInsightsCommand, ReportQuery
from tradejournal.core.config import settings
from tradejournal.domain.journal.entities import User
from tradejournal.domain.journal.statistics import GroupPerformance
from tradejournal.interfaces.journal.dependencies import (
    get_current_user,
    get_dashboard_stats_use_case,
    get_generate_insights_use_case,
    get_insight_stats_use_case,
    get_report_use_case,
)
from tradejournal.interfaces.journal.schemas import (
    DashboardStatsResponse,
    GroupPerformanceResponse,
    InsightsResponse,
    ReportResponse,
    ReportStatsResponse,
    StreakResponse,
    TrendPointResponse,
)
from tradejournal.shared.security.rate_limiting import limiter

router = APIRouter(tags=["analytics"])

CACHE_HEADER = "X-Cache"


def _cache_status(hit: bool) -> str:
    return "HIT" if hit else "MISS"


def _groups(groups: list[GroupPerformance]) -> list[GroupPerformanceResponse]:
    return [GroupPerformanceResponse(**asdict(g)) for g in groups]


@router.get(
    "/dashboard/stats",
    response_model=DashboardStatsResponse,
    summary="Dashboard statistics",
    description="Headline trading and portfolio figures for all|week|month|year.",
)
@limiter.limit(settings.rate_limit_standard)
def dashboard_stats(
    request: Request,
    period: str = "all",
    user: User = Depends(get_current_user),
    use_case: GetDashboardStatsUseCase = Depends(get_dashboard_stats_use_case),
) -> DashboardStatsResponse:
    stats = use_case.execute(user.id, period)
    return DashboardStatsResponse(**asdict(stats))


@router.get(
    "/reports",
    response_model=ReportResponse,
    summary="Performance report",
    description="Report for weekly|monthly|yearly|custom|all; custom takes start and end.",
)
@limiter.limit(settings.rate_limit_standard)
def report(
    request: Request,
    period: str = "monthly",
    start: date | None = None,
    end: date | None = None,
    user: User = Depends(get_current_user),
    use_case: GetReportUseCase = Depends(get_report_use_case),
) -> ReportResponse:
    result = use_case.execute(ReportQuery(user_id=user.id, period=period, start=start, end=end))
    return ReportResponse(
        period=result.period,
        start_date=result.start,
        end_date=result.end,
        stats=ReportStatsResponse(**asdict(result.stats)),
        script_performance=_groups(result.scripts),
        mood_performance=_groups(result.moods),
        weekday_performance=_groups(result.weekdays),
        daily_trend=[TrendPointResponse(**asdict(p)) for p in result.trend],
        streaks=StreakResponse(**asdict(result.streaks)),
    )


@router.get(
    "/insights/stats",
    response_model=dict[str, Any],
    summary="Trade statistics for the insights page",
)
@limiter.limit(settings.rate_limit_standard)
def insight_stats(
    request: Request,
    response: Response,
    user: User = Depends(get_current_user),
    use_case: GetInsightStatsUseCase = Depends(get_insight_stats_use_case),
) -> dict[str, Any]:
    result = use_case.execute(user.id)
    response.headers[CACHE_HEADER] = _cache_status(result.cache_hit)
    return result.data


@router.post(
    "/insights",
    response_model=InsightsResponse,
    summary="Generate AI insights",
    description="Behavioural analysis of the user's trades. Cached unless `refresh=true`.",
)
@limiter.limit(settings.rate_limit_ai)
def generate_insights(
    request: Request,
    response: Response,
    refresh: bool = False,
    user: User = Depends(get_current_user),
    use_case: GenerateInsightsUseCase = Depends(get_generate_insights_use_case),
) -> InsightsResponse:
    result = use_case.execute(GenerateInsightsCommand(user_id=user.id, refresh=refresh))
    response.headers[CACHE_HEADER] = _cache_status(result.cache_hit)
    insights = result.data
    return InsightsResponse(
        insights=insights.insights,
        trades_analyzed=insights.trades_analyzed,
        generated_at=insights.generated_at,
    )
