"""
Trade statistics for dashboards, reports and insight prompts.

Pure functions over lists of entities. Every figure is based on the
net P&L of a trade (after charges). Rates are percentages in [0, 100].
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Optional

from tradejournal.domain.journal.entities import IntradayTrade, PortfolioStock
from tradejournal.domain.journal.errors import InvalidPeriodError

DASHBOARD_PERIODS = ("all", "week", "month", "year")
REPORT_PERIODS = ("weekly", "monthly", "yearly", "custom", "all")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class DashboardStats:
    total_pl: float
    win_rate: float
    profit_factor: Optional[float]
    total_trades: int
    winning_trades: int
    losing_trades: int
    best_trade: float
    worst_trade: float
    portfolio_value: float
    portfolio_pl: float
    setup_adherence: float
    avg_trade_size: float
    trading_days: int
    period: str


@dataclass(frozen=True)
class ReportStats:
    total_trades: int
    trading_days: int
    winning_trades: int
    losing_trades: int
    break_even_trades: int
    total_profit_loss: float
    total_profit: float
    total_loss: float
    win_rate: float
    follow_setup_count: int
    follow_setup_rate: float
    avg_profit_per_trade: float
    avg_winning_trade: float
    avg_losing_trade: float
    largest_win: float
    largest_loss: float
    profit_factor: Optional[float]
    traded_scripts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GroupPerformance:
    """Aggregate performance of the trades sharing one key (script, mood, weekday)."""

    key: str
    trades: int
    wins: int
    win_rate: float
    total_pl: float
    avg_pl: float


@dataclass(frozen=True)
class TrendPoint:
    date: date
    trades: int
    pl: float
    cumulative_pl: float


@dataclass(frozen=True)
class StreakSummary:
    current_streak: int
    longest_streak: int
    last_trade_date: Optional[date]
    trading_days: int


@dataclass(frozen=True)
class SetupStats:
    win_rate: float
    avg_pl: float


@dataclass(frozen=True)
class TradeSummary:
    """Headline figures used by the insights statistics and prompt."""

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    total_pl: float
    avg_pl: float
    setup_adherence_rate: float


def _rate(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def _profit_factor(total_profit: float, total_loss: float) -> Optional[float]:
    """Gross profit over gross loss; None stands for an infinite factor."""
    if total_loss > 0:
        return total_profit / total_loss
    if total_profit > 0:
        return None
    return 0.0


def _week_start(today: date) -> date:
    return today - timedelta(days=today.weekday())


def dashboard_period_start(period: str, today: date) -> Optional[date]:
    """Return the first date included in a dashboard period.

    Raises:
        InvalidPeriodError: If the period is not one of DASHBOARD_PERIODS.
    """
    if period == "all":
        return None
    if period == "week":
        return _week_start(today)
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    raise InvalidPeriodError(f"Invalid period: {period}")


def report_date_range(
    period: str,
    today: date,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """Resolve a report period into an inclusive (start, end) date range.

    ``custom`` uses the supplied bounds, defaulting to the first of the
    current month and today. ``all`` is unbounded.

    Raises:
        InvalidPeriodError: On an unknown period or when start is after end.
    """
    if period == "all":
        return None, None
    if period == "weekly":
        return _week_start(today), today
    if period == "monthly":
        return today.replace(day=1), today
    if period == "yearly":
        return today.replace(month=1, day=1), today
    if period == "custom":
        range_start = start or today.replace(day=1)
        range_end = end or today
        if range_start > range_end:
            raise InvalidPeriodError("Start date must not be after end date")
        return range_start, range_end
    raise InvalidPeriodError(f"Invalid period: {period}")


def compute_dashboard_stats(
    trades: list[IntradayTrade],
    holdings: list[PortfolioStock],
    period: str,
) -> DashboardStats:
    total_trades = len(trades)
    total_pl = sum(t.net_profit_loss for t in trades)
    winners = [t for t in trades if t.is_win]
    losers = [t for t in trades if t.is_loss]
    total_profit = sum(t.net_profit_loss for t in winners)
    total_loss = abs(sum(t.net_profit_loss for t in losers))
    followed = sum(1 for t in trades if t.follow_setup)
    pls = [t.net_profit_loss for t in trades]

    return DashboardStats(
        total_pl=total_pl,
        win_rate=_rate(len(winners), total_trades),
        profit_factor=_profit_factor(total_profit, total_loss),
        total_trades=total_trades,
        winning_trades=len(winners),
        losing_trades=len(losers),
        best_trade=max(pls) if pls else 0.0,
        worst_trade=min(pls) if pls else 0.0,
        portfolio_value=sum(h.market_value for h in holdings),
        portfolio_pl=sum(h.profit_loss or 0.0 for h in holdings),
        setup_adherence=_rate(followed, total_trades),
        avg_trade_size=total_pl / total_trades if total_trades else 0.0,
        trading_days=len({t.trade_date for t in trades}),
        period=period,
    )


def compute_report_stats(trades: list[IntradayTrade]) -> ReportStats:
    total_trades = len(trades)
    winners = [t for t in trades if t.is_win]
    losers = [t for t in trades if t.is_loss]
    total_profit = sum(t.net_profit_loss for t in winners)
    total_loss = abs(sum(t.net_profit_loss for t in losers))
    total_pl = sum(t.net_profit_loss for t in trades)
    followed = sum(1 for t in trades if t.follow_setup)

    scripts: list[str] = []
    for trade in trades:
        if trade.script not in scripts:
            scripts.append(trade.script)

    return ReportStats(
        total_trades=total_trades,
        trading_days=len({t.trade_date for t in trades}),
        winning_trades=len(winners),
        losing_trades=len(losers),
        break_even_trades=total_trades - len(winners) - len(losers),
        total_profit_loss=total_pl,
        total_profit=total_profit,
        total_loss=total_loss,
        win_rate=_rate(len(winners), total_trades),
        follow_setup_count=followed,
        follow_setup_rate=_rate(followed, total_trades),
        avg_profit_per_trade=total_pl / total_trades if total_trades else 0.0,
        avg_winning_trade=total_profit / len(winners) if winners else 0.0,
        avg_losing_trade=total_loss / len(losers) if losers else 0.0,
        largest_win=max((t.net_profit_loss for t in winners), default=0.0),
        largest_loss=min((t.net_profit_loss for t in losers), default=0.0),
        profit_factor=_profit_factor(total_profit, total_loss),
        traded_scripts=scripts,
    )


def _group_by(
    trades: list[IntradayTrade], key: Callable[[IntradayTrade], str]
) -> dict[str, list[IntradayTrade]]:
    groups: dict[str, list[IntradayTrade]] = defaultdict(list)
    for trade in trades:
        groups[key(trade)].append(trade)
    return groups


def _performance(key: str, trades: list[IntradayTrade]) -> GroupPerformance:
    wins = sum(1 for t in trades if t.is_win)
    total_pl = sum(t.net_profit_loss for t in trades)
    return GroupPerformance(
        key=key,
        trades=len(trades),
        wins=wins,
        win_rate=_rate(wins, len(trades)),
        total_pl=total_pl,
        avg_pl=total_pl / len(trades) if trades else 0.0,
    )


def script_performance(trades: list[IntradayTrade]) -> list[GroupPerformance]:
    """Per-instrument performance, most profitable first."""
    groups = _group_by(trades, lambda t: t.script)
    result = [_performance(script, group) for script, group in groups.items()]
    return sorted(result, key=lambda p: p.total_pl, reverse=True)


def mood_performance(trades: list[IntradayTrade]) -> list[GroupPerformance]:
    """Per-mood performance in order of first appearance."""
    groups = _group_by(trades, lambda t: t.mood.value)
    return [_performance(mood, group) for mood, group in groups.items()]


def weekday_performance(trades: list[IntradayTrade]) -> list[GroupPerformance]:
    """Per-weekday performance, Monday first, only days that were traded."""
    groups = _group_by(trades, lambda t: WEEKDAYS[t.trade_date.weekday()])
    return [_performance(day, groups[day]) for day in WEEKDAYS if day in groups]


def pl_trend(trades: list[IntradayTrade]) -> list[TrendPoint]:
    """Daily net P&L with a running total, oldest day first."""
    by_day = _group_by(trades, lambda t: t.trade_date.isoformat())
    points = []
    cumulative = 0.0
    for day in sorted(by_day):
        group = by_day[day]
        day_pl = sum(t.net_profit_loss for t in group)
        cumulative += day_pl
        points.append(
            TrendPoint(
                date=group[0].trade_date,
                trades=len(group),
                pl=day_pl,
                cumulative_pl=cumulative,
            )
        )
    return points


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def _next_business_day(day: date) -> date:
    candidate = day + timedelta(days=1)
    while _is_weekend(candidate):
        candidate += timedelta(days=1)
    return candidate


def trading_streaks(trade_dates: list[date], today: date) -> StreakSummary:
    """Count consecutive trading days, ignoring weekends.

    The current streak only counts if the user traded today or yesterday;
    it then walks backwards over business days until a day without trades.
    """
    unique = sorted(set(trade_dates))
    if not unique:
        return StreakSummary(0, 0, None, 0)

    traded = set(unique)
    current = 0
    yesterday = today - timedelta(days=1)
    if today in traded:
        cursor: Optional[date] = today
    elif yesterday in traded:
        cursor = yesterday
    else:
        cursor = None

    while cursor is not None:
        if _is_weekend(cursor):
            cursor -= timedelta(days=1)
            continue
        if cursor not in traded:
            break
        current += 1
        cursor -= timedelta(days=1)

    longest = 0
    run = 0
    previous: Optional[date] = None
    for day in unique:
        if previous is not None and day <= _next_business_day(previous):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    return StreakSummary(
        current_streak=current,
        longest_streak=longest,
        last_trade_date=unique[-1],
        trading_days=len(unique),
    )


def summarize_trades(trades: list[IntradayTrade]) -> TradeSummary:
    total_trades = len(trades)
    winning = sum(1 for t in trades if t.is_win)
    losing = sum(1 for t in trades if t.is_loss)
    total_pl = sum(t.net_profit_loss for t in trades)
    followed = sum(1 for t in trades if t.follow_setup)
    return TradeSummary(
        total_trades=total_trades,
        winning_trades=winning,
        losing_trades=losing,
        win_rate=_rate(winning, total_trades),
        total_pl=total_pl,
        avg_pl=total_pl / total_trades if total_trades else 0.0,
        setup_adherence_rate=_rate(followed, total_trades),
    )


def mood_distribution(trades: list[IntradayTrade]) -> dict[str, int]:
    distribution: dict[str, int] = {}
    for trade in trades:
        distribution[trade.mood.value] = distribution.get(trade.mood.value, 0) + 1
    return distribution


def setup_stats(trades: list[IntradayTrade], followed: bool) -> SetupStats:
    """Win rate and average P&L of trades that did (or did not) follow the setup."""
    group = [t for t in trades if t.follow_setup is followed]
    wins = sum(1 for t in group if t.is_win)
    return SetupStats(
        win_rate=_rate(wins, len(group)),
        avg_pl=sum(t.net_profit_loss for t in group) / len(group) if group else 0.0,
    )
